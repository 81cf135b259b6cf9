from typing import Final

USTAR_SEMVER: Final = "0.1.0"
