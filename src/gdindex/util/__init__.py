from .mime import (
    FOLDER_MIME,
    PASSWORD_MARKER_NAME,
    SHORTCUT_MIME,
    is_folder,
    is_google_app,
)
from .paths import (
    decode_segment,
    encode_segment,
    normalize_dir_path,
    split_file_path,
    split_segments,
)
from .retry import RetryPolicy, run_with_retry
from .time import days_to_ms, now_epoch_ms, parse_rfc3339, to_rfc3339

__all__ = [
    "FOLDER_MIME",
    "SHORTCUT_MIME",
    "PASSWORD_MARKER_NAME",
    "is_folder",
    "is_google_app",
    "split_segments",
    "normalize_dir_path",
    "split_file_path",
    "encode_segment",
    "decode_segment",
    "RetryPolicy",
    "run_with_retry",
    "now_epoch_ms",
    "days_to_ms",
    "parse_rfc3339",
    "to_rfc3339",
]
