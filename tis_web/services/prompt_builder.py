from __future__ import annotations

from typing import Any, Dict

SYSTEM_INSTRUCTION = """
You are a cynical, highly protective consumer rights attorney.

CRITICAL RULES:
- Be blunt and opinionated.
- Look for arbitration clauses, liability waivers, forced data sharing, auto-renew traps.
- ALWAYS respond in STRICT VALID JSON only.
- Do NOT include markdown.
- Do NOT include explanation outside JSON.

Return JSON in this exact structure:

{
  "companyName": "string",
  "summary": "string",
  "riskScore": number,
  "verdict": "Safe | Caution | Risky | Extreme Risk",
  "criticalPoints": [
    {
      "title": "string",
      "description": "string",
      "severity": "High | Medium | Low"
    }
  ],
  "expertOpinion": "string"
}
""".strip()

# JSON Schema of the result, used where the provider supports constrained output
RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "companyName": {"type": "string"},
        "summary": {"type": "string"},
        "riskScore": {"type": "integer", "minimum": 0, "maximum": 100},
        "verdict": {"type": "string", "enum": ["Safe", "Caution", "Risky", "Extreme Risk"]},
        "criticalPoints": {
            "type": "array",
            "maxItems": 5,
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "description": {"type": "string"},
                    "severity": {"type": "string", "enum": ["High", "Medium", "Low"]},
                },
                "required": ["title", "description", "severity"],
                "additionalProperties": False,
            },
        },
        "expertOpinion": {"type": "string"},
    },
    "required": ["companyName", "summary", "riskScore", "verdict", "criticalPoints", "expertOpinion"],
    "additionalProperties": False,
}


def build_url_directive(url: str, resolved_url: str = "") -> str:
    target = url
    if resolved_url and resolved_url != url:
        target = f"{url}\n(likely address: {resolved_url})"
    return (
        "Analyze the Terms of Service and Privacy Policy for this website:\n"
        f"{target}\n\n"
        "Locate the current terms if you are able to browse. If you cannot retrieve them, "
        "rely on what you already know about this service's published terms.\n\n"
        "Identify top 5 risks."
    )


def build_file_directive() -> str:
    return "Analyze the top 5 most dangerous clauses in this document."


def build_text_directive(text: str) -> str:
    return (
        "Analyze this legal text and identify:\n\n"
        "1. Top 5 risky clauses\n"
        "2. Overall risk score (0-100)\n"
        "3. Clear summary\n"
        "4. Expert legal opinion\n\n"
        "Text:\n"
        f"{text}"
    )
