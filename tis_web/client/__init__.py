from .api_client import ApiClient, file_payload, file_payload_from_path, text_payload, url_payload
from .scan_session import CooldownActiveError, ScanBusyError, ScanSession, ScanTicket

__all__ = [
    "ApiClient",
    "file_payload",
    "file_payload_from_path",
    "text_payload",
    "url_payload",
    "CooldownActiveError",
    "ScanBusyError",
    "ScanSession",
    "ScanTicket",
]
