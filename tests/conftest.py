from __future__ import annotations

import sys
from pathlib import Path

# Allow `import shiritori_neo` in tests without installing the package.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
