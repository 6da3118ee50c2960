import os as _os
import sys

import pytest

# Ensure project root is importable (so `import main` / `import cli` work without installing)
_project_root = _os.path.dirname(_os.path.dirname(__file__))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from mycelium import db  # noqa: E402
from mycelium.models import DesiredServer  # noqa: E402
from mycelium.settings import Settings  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_journal(tmp_path, monkeypatch):
    """Give every test its own journal database."""
    cfg = Settings(db_path=str(tmp_path / "journal.db"))
    monkeypatch.setattr(db, "settings", cfg)
    db.init_db()
    return cfg


@pytest.fixture
def server():
    def _make(name, address="10.0.0.1", host=None, priority=None):
        return DesiredServer(name=name, address=address, forced_host=host, priority=priority)

    return _make
