"""
Gemeinsame Test-Fixtures für Clive.

Diese Fixtures isolieren Tests von externen Abhängigkeiten:
- Dateisystem (Preferences, Arbeitsverzeichnis)
- Umgebungsvariablen (CLIVE_*)

Shared Fixtures für häufig genutzte Objekte:
- usage_output: Typische `claude /usage` Ausgabe
- python_command: UsageCommand, das ein Python-Snippet als Kindprozess startet
"""

import os
import sys
from pathlib import Path

import pytest

# Projekt-Root zum Python-Path hinzufügen
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def usage_output():
    """
    Factory für `claude /usage` Ausgaben.

    Wenn sich das Format der CLI ändert, nur hier anpassen.
    """

    def _create(session="45%", weekly="32%", resets="3pm (Australia/Melbourne)"):
        lines = ["Settings:  Status   Config   Usage", ""]
        lines.append("Current session")
        if session is not None:
            lines.append(f"█████████████▌      {session} used")
        if resets is not None:
            lines.append(f"Resets {resets}")
        lines.append("")
        lines.append("Current week (all models)")
        if weekly is not None:
            lines.append(f"██████▌             {weekly} used")
        lines.append("Resets Oct 21, 9am (Australia/Melbourne)")
        return "\n".join(lines) + "\n"

    return _create


@pytest.fixture
def python_command(tmp_path):
    """
    Factory für UsageCommand mit Python-Kindprozess.

    Usage:
        command = python_command("print('Current session 45%', flush=True)")
    """
    from usage.command import UsageCommand

    def _create(code: str):
        return UsageCommand(
            argv=[sys.executable, "-c", code],
            cwd=tmp_path,
            env=dict(os.environ),
        )

    return _create


# =============================================================================
# Environment & Isolation Fixtures
# =============================================================================


@pytest.fixture
def prefs_file(tmp_path, monkeypatch):
    """Ersetzt ~/.clive/preferences.json durch eine temporäre Datei."""
    import config

    path = tmp_path / "prefs" / "preferences.json"
    monkeypatch.setattr(config, "PREFS_FILE", path)
    return path


@pytest.fixture
def clean_env(monkeypatch):
    """Entfernt alle CLIVE_* Umgebungsvariablen für saubere Tests."""
    for key in list(os.environ.keys()):
        if key.startswith("CLIVE_"):
            monkeypatch.delenv(key, raising=False)
