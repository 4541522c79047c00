from teamflow.observability.logger import get_logger, new_correlation_id, setup_logging

__all__ = ["get_logger", "new_correlation_id", "setup_logging"]
