"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import os
import sys
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local vaultseek package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of vaultseek modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("vaultseek"):
        del sys.modules[module_name]


@pytest.fixture(autouse=True)
def _isolate_global_config(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Keep a developer's ~/.config/vaultseek and VAULTSEEK__* env out of tests."""
    from vaultseek.config import loader

    home = tmp_path_factory.mktemp("home")
    monkeypatch.setattr(loader, "GLOBAL_CONFIG_PATH", home / "config.yaml")
    for key in list(os.environ):
        if key.startswith("VAULTSEEK__"):
            monkeypatch.delenv(key)
