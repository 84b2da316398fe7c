"""TermsInShort: terms-of-service risk scans backed by an LLM."""
