from datetime import datetime
from typing import List, Optional, Literal, Dict
from pydantic import BaseModel, ConfigDict, Field, model_validator

Operation = Literal["add", "subtract", "multiply", "divide"]
OperationFrequency = Literal["never", "rare", "normal", "often", "very_often"]
NotationStyle = Literal["operators", "arrows", "equals"]

# thứ tự cố định, dùng khi chọn phép toán theo tỉ lệ
OPERATIONS: List[Operation] = ["add", "subtract", "multiply", "divide"]

OPERATION_SYMBOLS: Dict[str, str] = {
    "add": "+",
    "subtract": "−",
    "multiply": "×",
    "divide": "÷",
}


class OperationConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    frequency: OperationFrequency = "normal"
    min_value: int = Field(ge=0)
    max_value: int = Field(ge=0)

    @model_validator(mode="after")
    def _check_bounds(self):
        if self.min_value > self.max_value:
            raise ValueError("min_value must be <= max_value")
        return self


class OperationSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    add: OperationConfig
    subtract: OperationConfig
    multiply: OperationConfig
    divide: OperationConfig

    def get(self, op: Operation) -> OperationConfig:
        return getattr(self, op)


class OperationMix(BaseModel):
    """Relative percentages per operation. Meant to sum to 100 but not enforced."""
    model_config = ConfigDict(frozen=True)

    add: float = Field(default=25, ge=0)
    subtract: float = Field(default=25, ge=0)
    multiply: float = Field(default=25, ge=0)
    divide: float = Field(default=25, ge=0)

    def get(self, op: Operation) -> float:
        return getattr(self, op)

    def total(self) -> float:
        return self.add + self.subtract + self.multiply + self.divide


class GameConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    difficulty_level: int = 1
    max_result: int = Field(ge=1)
    chain_length: int = Field(ge=3, le=100)
    chain_count: int = Field(ge=1, le=100)
    allow_negative_results: bool = False
    operations: OperationSet
    operation_mix: OperationMix
    # chỉ dùng cho hiển thị
    notation_style: NotationStyle = "operators"
    show_sum_of_digits: bool = False
    show_result_lines: bool = False
    time_limit: int = Field(default=0, ge=0)  # giây, 0 = không giới hạn
    seed: Optional[int] = None


class Problem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    start_value: int
    operation: Operation
    operand: int
    result: int


class ProblemChain(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    starting_number: int
    problems: List[Problem]


class Worksheet(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    chains: List[ProblemChain] = []
    config: GameConfig
    created_at: datetime

    @property
    def is_partial(self) -> bool:
        return len(self.chains) < self.config.chain_count


class Answer(BaseModel):
    model_config = ConfigDict(frozen=True)

    problem_id: str
    user_answer: Optional[int] = None
    is_correct: Optional[bool] = None
    answered_at: Optional[datetime] = None


class Score(BaseModel):
    model_config = ConfigDict(frozen=True)

    correct: int = 0
    incorrect: int = 0
    total: int = 0
    percentage: int = 0


class GameSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    worksheet: Worksheet
    answers: Dict[str, Answer] = {}
    started_at: datetime
    ended_at: Optional[datetime] = None
    is_complete: bool = False
    score: Score = Score()


class DifficultyLevel(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    description: str
    max_result: int = Field(ge=1)
    operations: OperationSet
    chain_length: int = Field(ge=3)
    recommended: bool = False


DEFAULT_CONFIG = GameConfig(
    difficulty_level=1,
    max_result=100,
    chain_length=6,
    chain_count=5,
    operations=OperationSet(
        add=OperationConfig(min_value=1, max_value=20),
        subtract=OperationConfig(min_value=1, max_value=20),
        multiply=OperationConfig(min_value=2, max_value=10),
        divide=OperationConfig(min_value=2, max_value=10),
    ),
    operation_mix=OperationMix(add=40, subtract=40, multiply=10, divide=10),  # preset Basic
    allow_negative_results=False,
)
