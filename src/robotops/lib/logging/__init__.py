from robotops.lib.logging.context import (
    format_raised_exception_info_as_dict,
    logging_context,
    save_to_logging_context,
)

__all__ = [
    "format_raised_exception_info_as_dict",
    "logging_context",
    "save_to_logging_context",
]
