from .controller import ScanController, render_result

__all__ = ["ScanController", "render_result"]
