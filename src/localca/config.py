import os
from dotenv import load_dotenv

load_dotenv()

# Storage layout
ROOT_CERT_NAME = "rootCA.pem"
ROOT_KEY_NAME = "rootCA.key"
BACKUP_SUFFIX = "-old.bak"
APP_DIR_NAME = os.getenv("LOCALCA_APP_DIR_NAME", "localca")

# Subject defaults
DEFAULT_COUNTRY = os.getenv("LOCALCA_DEFAULT_COUNTRY", "DE")

# Lifetimes. Leaves are capped at 825 days, the limit macOS/iOS apply to TLS certificates.
DEFAULT_ROOT_YEARS = int(os.getenv("LOCALCA_DEFAULT_ROOT_YEARS", "10"))
DEFAULT_ISSUED_YEARS = 1
DEFAULT_ISSUED_MONTHS = 1
LEAF_MAX_DAYS = 825

# Legacy PKCS#12 password, the often hardcoded default. Not a secret.
PKCS12_PASSWORD = "changeit"

LOG_LEVEL = os.getenv("LOCALCA_LOG_LEVEL", "INFO").upper()

# File modes
KEY_FILE_MODE = 0o600
CA_KEY_FILE_MODE = 0o400
CERT_FILE_MODE = 0o644
CAROOT_DIR_MODE = 0o755


def trust_stores() -> list[str]:
    return [s.strip() for s in os.getenv("TRUST_STORES", "").split(",") if s.strip()]
