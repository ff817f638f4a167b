from pydantic import BaseModel, Field
from typing import Optional, Dict, List


class CourseOutcome(BaseModel):
    code: str
    description: str = ""


class Question(BaseModel):
    number: str
    statement: str = ""
    co_code: str
    max_marks: int


class ExamSetup(BaseModel):
    """Editable exam form, as submitted by the setup screen.

    Blank rows are allowed here; validation.validate_setup filters and checks them.
    """
    name: str = ""
    total_marks: int = 0
    course_outcomes: List[CourseOutcome] = []
    questions: List[Question] = []


class ExamDefinition(ExamSetup):
    id: str
    created_at: float = 0.0

    def find_question(self, number: str) -> Optional[Question]:
        for q in self.questions:
            if q.number == number:
                return q
        return None

    def co_codes(self) -> List[str]:
        return [co.code for co in self.course_outcomes]


class ExamSummary(BaseModel):
    id: str
    name: str
    total_marks: int
    co_count: int
    question_count: int
    created_at: float


class MarksEntry(BaseModel):
    # fractional input is accepted and truncated by aggregator.clamp_marks
    marks: Dict[str, float] = {}


class StudentRecord(BaseModel):
    student_id: str
    question_marks: Dict[str, int] = {}
    # derived from question_marks; stored for compatibility, recomputed on read
    co_marks: Dict[str, int] = {}
    total: int = 0


class RecordSaved(BaseModel):
    record: StudentRecord
    created: bool


class MarksPreview(BaseModel):
    question_marks: Dict[str, int]
    co_marks: Dict[str, int]
    co_max_marks: Dict[str, int]
    co_percentages: Dict[str, int]
    question_percentages: Dict[str, int]
    total: int
    percentage: int
    band: str


class ResultRow(BaseModel):
    student_id: str
    co_marks: Dict[str, int]
    total: int
    percentage: int
    band: str
    passed: bool


class ClassStatistics(BaseModel):
    count: int = 0
    average_percentage: float = 0.0
    highest: Optional[int] = None
    lowest: Optional[int] = None
    pass_count: int = 0


class ExamResults(BaseModel):
    exam_id: str
    exam_name: str
    total_marks: int
    co_max_marks: Dict[str, int]
    rows: List[ResultRow] = Field(default_factory=list)
    statistics: ClassStatistics = Field(default_factory=ClassStatistics)
