from dataclasses import dataclass, field
from typing import Protocol, List, Optional, Tuple


@dataclass
class PersonalInfo:
    first_name: str = ""
    last_name: str = ""
    age: int = 0
    gender: str = "male"  # "male"/"female"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass
class MedicalHistory:
    family_history_thyroid: str = "no"
    radiation_exposure: str = "no"
    previous_thyroid_issues: str = "no"
    smoking: str = "never"  # "never" | "former" | "current"


@dataclass
class Symptoms:
    neck_swelling: str = "no"
    difficulty_swallowing: str = "no"
    voice_changes: str = "no"
    neck_pain: str = "no"
    swollen_lymph_nodes: str = "no"


@dataclass
class LabResults:
    # raw form strings; blank or None means not measured
    tsh: Optional[str] = None
    t3: Optional[str] = None
    t4: Optional[str] = None
    thyroglobulin: Optional[str] = None
    calcitonin: Optional[str] = None


@dataclass
class PatientRecord:
    personal_info: PersonalInfo = field(default_factory=PersonalInfo)
    medical_history: MedicalHistory = field(default_factory=MedicalHistory)
    symptoms: Symptoms = field(default_factory=Symptoms)
    lab_results: LabResults = field(default_factory=LabResults)


@dataclass(frozen=True)
class ReferenceRange:
    min: float
    max: float
    unit: str


@dataclass(frozen=True)
class LabAnalysis:
    abnormal: bool
    details: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PredictionResult:
    score: int
    tier: str  # "low" | "moderate" | "high"
    factors: Tuple[str, ...]
    lab_analysis: LabAnalysis


@dataclass
class ResultItem:
    metric: str
    value: Optional[float] | str
    interpretation: str
    severity: str  # "low" | "moderate" | "high" | "info"


class HealthModule(Protocol):
    id: str
    title: str
    def inputs(self, record: PatientRecord) -> PatientRecord: ...
    def validate(self, record: PatientRecord) -> List[str]: ...
    def compute(self, record: PatientRecord) -> PredictionResult: ...
    def render(self, result: PredictionResult) -> None: ...
    def to_pdf(self, result: PredictionResult) -> List[list[str]]: ...
