"""
Tests for config and seed loading
"""
from pathlib import Path

import pytest
import yaml

from enigma.config import load_config, update_setting
from enigma.models import Difficulty
from enigma.seed_loader import load_seed


ROOT = Path(__file__).resolve().parent.parent


def test_load_shipped_config():
    """Shipped config matches the defaults"""
    settings = load_config(str(ROOT / "config" / "game.yaml"))
    assert settings.default_duration == 7200
    assert settings.base_points[Difficulty.MEDIUM] == 100
    assert settings.quotas[Difficulty.HARD] == 3


def test_load_config_missing(tmp_path):
    """Missing config file raises"""
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_partial_config_uses_defaults(tmp_path):
    """Keys not in the file keep their defaults"""
    path = tmp_path / "game.yaml"
    path.write_text("poll_interval: 2\n")
    settings = load_config(str(path))
    assert settings.poll_interval == 2
    assert settings.hint_penalty == 5


def test_update_setting(tmp_path):
    """Single keys can be written back"""
    path = tmp_path / "game.yaml"
    path.write_text("poll_interval: 2\n")
    settings = update_setting("default_duration", 900, str(path))
    assert settings.default_duration == 900
    assert yaml.safe_load(path.read_text()) == {"poll_interval": 2, "default_duration": 900}

    with pytest.raises(KeyError):
        update_setting("nonsense", 1, str(path))


@pytest.mark.asyncio
async def test_load_shipped_seed():
    """Shipped seed data loads into a usable store"""
    store = load_seed(str(ROOT / "data" / "seed.yaml"))
    assert (await store.get_access_code("BSIT3A")).section == "BSIT-3A"
    assert not (await store.get_access_code("BSCS1A")).active
    questions = await store.list_active_questions()
    assert {q.difficulty for q in questions} == set(Difficulty)
    assert await store.check_answer("m01", "ENIGMA")
    assert await store.validate_admin_credentials("admin", "changeme")


def test_seed_rejects_bad_question(tmp_path):
    """Malformed questions are refused"""
    path = tmp_path / "seed.yaml"
    path.write_text(yaml.safe_dump({"questions": [
        {"id": "q1", "prompt": "p", "answer": "a", "difficulty": "impossible"},
    ]}))
    with pytest.raises(ValueError):
        load_seed(str(path))

    path.write_text(yaml.safe_dump({"questions": [
        {"id": "q1", "prompt": "p", "answer": "a", "difficulty": "easy", "hints": ["1", "2", "3", "4"]},
    ]}))
    with pytest.raises(ValueError):
        load_seed(str(path))

    path.write_text(yaml.safe_dump({"questions": [
        {"id": "q1", "prompt": "p", "answer": "a", "difficulty": "easy"},
        {"id": "q1", "prompt": "p", "answer": "b", "difficulty": "easy"},
    ]}))
    with pytest.raises(ValueError):
        load_seed(str(path))


def test_seed_missing(tmp_path):
    """Missing seed file raises"""
    with pytest.raises(FileNotFoundError):
        load_seed(str(tmp_path / "nope.yaml"))
