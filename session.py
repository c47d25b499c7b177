import math
import random
from datetime import datetime, timezone
from typing import Dict, Optional

from schema import Answer, GameSession, Problem, Score, Worksheet
from generator import generate_id, get_total_problems


def _now() -> datetime:
    return datetime.now(timezone.utc)


def start_session(worksheet: Worksheet, rng: Optional[random.Random] = None) -> GameSession:
    rng = rng or random.Random()
    return GameSession(id=generate_id(rng), worksheet=worksheet, started_at=_now())


def find_problem(worksheet: Worksheet, problem_id: str) -> Optional[Problem]:
    for chain in worksheet.chains:
        for p in chain.problems:
            if p.id == problem_id:
                return p
    return None


def submit_answer(session: GameSession, problem_id: str, answer: int) -> GameSession:
    """Record an answer. Unknown ids leave the session untouched."""
    problem = find_problem(session.worksheet, problem_id)
    if problem is None:
        return session

    record = Answer(
        problem_id=problem_id,
        user_answer=answer,
        is_correct=answer == problem.result,
        answered_at=_now(),
    )
    # map mới mỗi lần cập nhật
    answers = {**session.answers, problem_id: record}
    return session.model_copy(update={"answers": answers})


def calculate_score(answers: Dict[str, Answer]) -> Score:
    correct = sum(1 for a in answers.values() if a.is_correct is True)
    incorrect = sum(1 for a in answers.values() if a.is_correct is False)
    total = correct + incorrect
    percentage = math.floor(correct / total * 100 + 0.5) if total > 0 else 0
    return Score(correct=correct, incorrect=incorrect, total=total, percentage=percentage)


def end_session(session: GameSession) -> GameSession:
    return session.model_copy(update={
        "ended_at": _now(),
        "is_complete": True,
        "score": calculate_score(session.answers),
    })


def answered_count(session: GameSession) -> int:
    return len(session.answers)


def correct_count(session: GameSession) -> int:
    return sum(1 for a in session.answers.values() if a.is_correct)


def is_all_answered(session: GameSession) -> bool:
    return len(session.answers) >= get_total_problems(session.worksheet)
