"""
Seed data loader from YAML
"""
import logging
import yaml
from pathlib import Path

from enigma.core.store import MemoryStore
from enigma.models import AccessCode, Difficulty, Question


logger = logging.getLogger(__name__)


def load_seed(seed_path: str) -> MemoryStore:
    """
    Build a MemoryStore from a YAML seed file

    YAML format:
        access_codes:
          - {code: CYBER-A, section: BSIT-3A, active: true}
        questions:
          - id: q1
            prompt: "I speak without a mouth..."
            answer: echo
            hints: ["...", "..."]
            difficulty: easy
            points: 50
        admin_users:
          - {username: admin, password: changeme}

    Args:
        seed_path: Path to YAML file

    Returns:
        Populated MemoryStore

    Raises:
        FileNotFoundError: If seed file not found
        ValueError: If a question is malformed or duplicated
    """
    path = Path(seed_path)

    if not path.exists():
        raise FileNotFoundError(f"Seed file not found: {seed_path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    store = MemoryStore()

    for row in data.get("access_codes", []):
        store.add_access_code(AccessCode(**row))

    for row in data.get("questions", []):
        qid = str(row.get("id", "")).strip()
        if not qid:
            raise ValueError("Question without id in seed file")

        answer = str(row.get("answer", "")).strip()
        if not answer:
            raise ValueError(f"Question {qid}: answer must not be empty")

        hints = [str(h) for h in row.get("hints", [])]
        if len(hints) > 3:
            raise ValueError(f"Question {qid}: at most 3 hints, got {len(hints)}")

        try:
            difficulty = Difficulty(str(row.get("difficulty", "")).strip().lower())
        except ValueError:
            raise ValueError(f"Question {qid}: unknown difficulty {row.get('difficulty')!r}")

        store.add_question(Question(
            id=qid,
            prompt=row["prompt"],
            answer=answer,
            hints=hints,
            difficulty=difficulty,
            points=int(row.get("points", 0)),
            active=bool(row.get("active", True)),
            image_url=row.get("image_url"),
        ))

    for row in data.get("admin_users", []):
        store.add_admin_user(row["username"], str(row["password"]))

    logger.info(
        f"✅ Loaded {len(data.get('access_codes', []))} access codes and "
        f"{len(data.get('questions', []))} questions from {seed_path}"
    )

    return store
