from .fixtures import (  # noqa: F401 # pytest fixtures
    debug_logger,
    log_buf,
    mock_gm,
    sample_tar,
    sample_tar_path,
    ustar_logger,
)
