from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Tuple
import datetime as dt
from enum import Enum


class Role(str, Enum):
    NURSE = "NURSE"            # medically-licensed staff
    CAREGIVER = "CAREGIVER"
    PART_TIME = "PART_TIME"
    ADMIN = "ADMIN"


class EmploymentKind(str, Enum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"


class ShiftKind(str, Enum):
    EARLY = "EARLY"
    DAY = "DAY"
    LATE = "LATE"
    NIGHT = "NIGHT"
    MORNING_OFF = "MORNING_OFF"  # rest day following a night
    AM_ONLY = "AM_ONLY"
    PM_ONLY = "PM_ONLY"
    OFF = "OFF"


# Display code, label and whether the kind counts as a working day
SHIFT_DEFINITIONS = {
    ShiftKind.EARLY: {"code": "E", "name": "Early", "working": True},
    ShiftKind.DAY: {"code": "D", "name": "Day", "working": True},
    ShiftKind.LATE: {"code": "L", "name": "Late", "working": True},
    ShiftKind.NIGHT: {"code": "N", "name": "Night", "working": True},
    ShiftKind.MORNING_OFF: {"code": "M", "name": "Post-night", "working": False},
    ShiftKind.AM_ONLY: {"code": "AM", "name": "AM only", "working": True},
    ShiftKind.PM_ONLY: {"code": "PM", "name": "PM only", "working": True},
    ShiftKind.OFF: {"code": "-", "name": "Off", "working": False},
}

WORKING_SHIFTS = [k for k, v in SHIFT_DEFINITIONS.items() if v["working"]]
REST_SHIFTS = [k for k, v in SHIFT_DEFINITIONS.items() if not v["working"]]


class RequirementMode(str, Enum):
    ROLE = "ROLE"        # one slot for one specific role
    ANY_OF = "ANY_OF"    # one slot, any role from the set
    ALL_OF = "ALL_OF"    # one slot per listed role


class SkillRequirement(BaseModel):
    mode: RequirementMode = RequirementMode.ROLE
    roles: List[Role] = Field(min_length=1)

    def slots(self) -> List[Tuple[Role, ...]]:
        """Each slot is the tuple of roles that can fill it directly."""
        if self.mode == RequirementMode.ANY_OF:
            return [tuple(self.roles)]
        if self.mode == RequirementMode.ROLE:
            return [(self.roles[0],)]
        return [(role,) for role in self.roles]


class ShiftRule(BaseModel):
    kind: ShiftKind
    min_staff: int = 1
    requirement: SkillRequirement
    mandatory: bool = True
    allow_part_time_as_nurse: bool = False  # DAY only in the default table
    description: str = ""


DEFAULT_SHIFT_RULES: List[ShiftRule] = [
    ShiftRule(
        kind=ShiftKind.EARLY, min_staff=2,
        requirement=SkillRequirement(mode=RequirementMode.ALL_OF, roles=[Role.NURSE, Role.CAREGIVER]),
        description="Early: one nurse and one caregiver",
    ),
    ShiftRule(
        kind=ShiftKind.DAY, min_staff=2,
        requirement=SkillRequirement(mode=RequirementMode.ALL_OF, roles=[Role.NURSE, Role.CAREGIVER]),
        allow_part_time_as_nurse=True,
        description="Day: one nurse and one caregiver (part-timer may cover the nurse)",
    ),
    ShiftRule(
        kind=ShiftKind.LATE, min_staff=1,
        requirement=SkillRequirement(mode=RequirementMode.ANY_OF, roles=[Role.NURSE, Role.CAREGIVER]),
        description="Late: one nurse or caregiver",
    ),
    ShiftRule(
        kind=ShiftKind.NIGHT, min_staff=2,
        requirement=SkillRequirement(mode=RequirementMode.ALL_OF, roles=[Role.NURSE, Role.CAREGIVER]),
        description="Night: one nurse and one caregiver",
    ),
    ShiftRule(
        kind=ShiftKind.PM_ONLY, min_staff=1,
        requirement=SkillRequirement(mode=RequirementMode.ROLE, roles=[Role.PART_TIME]),
        description="PM only: one part-timer",
    ),
]


class Employee(BaseModel):
    id: str
    name: str
    role: Role
    employment: EmploymentKind = EmploymentKind.FULL_TIME
    skills: List[str] = []
    can_act_as_roles: List[Role] = []           # e.g. admin holding a nursing licence
    restricted_to_shift_kinds: List[ShiftKind] = []  # empty = unrestricted
    flexible_substitute: bool = False           # may cover either role on DAY
    can_work_night: bool = True

    @property
    def licensed_capable(self) -> bool:
        return self.role == Role.ADMIN and Role.NURSE in self.can_act_as_roles

    @property
    def night_banned(self) -> bool:
        return (
            self.role in (Role.PART_TIME, Role.ADMIN)
            or self.employment == EmploymentKind.PART_TIME
            or not self.can_work_night
        )

    def allows_kind(self, kind: ShiftKind) -> bool:
        if not self.restricted_to_shift_kinds or not SHIFT_DEFINITIONS[kind]["working"]:
            return True
        return kind in self.restricted_to_shift_kinds


class ConstraintSet(BaseModel):
    max_consecutive_work_days: int = 5
    mandatory_days_off_per_month: int = 9
    balance_night_shifts: bool = True
    rest_after_night: bool = True          # NIGHT -> MORNING_OFF
    rest_after_morning_off: bool = True    # MORNING_OFF -> OFF
    absolute_minimum_staff: int = 2        # floor used by the aggressive days-off tier
    check_invariants: bool = False


class TimeOffCategory(str, Enum):
    PAID_LEAVE = "PAID_LEAVE"
    SICK_LEAVE = "SICK_LEAVE"
    FAMILY_LEAVE = "FAMILY_LEAVE"
    PERSONAL_LEAVE = "PERSONAL_LEAVE"
    MEDICAL_LEAVE = "MEDICAL_LEAVE"
    SPECIAL_LEAVE = "SPECIAL_LEAVE"
    SUMMER_VACATION = "SUMMER_VACATION"
    TRAINING_LEAVE = "TRAINING_LEAVE"
    LONG_WEEKEND = "LONG_WEEKEND"
    EMERGENCY_LEAVE = "EMERGENCY_LEAVE"


class RequestPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


PRIORITY_LEVELS = {
    RequestPriority.LOW: 1,
    RequestPriority.MEDIUM: 2,
    RequestPriority.HIGH: 3,
    RequestPriority.URGENT: 4,
}


class RequestStatus(str, Enum):
    APPROVED = "APPROVED"
    PENDING = "PENDING"
    REJECTED = "REJECTED"


class TimeOffRequest(BaseModel):
    id: Optional[str] = None
    employee_id: str
    date: dt.date
    reason: str = "Paid leave"
    category: TimeOffCategory = TimeOffCategory.PAID_LEAVE
    priority: RequestPriority = RequestPriority.MEDIUM
    consecutive_group: Optional[str] = None
    status: RequestStatus = RequestStatus.APPROVED

    @property
    def priority_level(self) -> int:
        return PRIORITY_LEVELS[self.priority]


class Assignment(BaseModel):
    employee_id: str
    employee_name: str
    reason: str = ""
    from_time_off_request: bool = False
    auto_assigned: bool = False
    forced: bool = False        # replaced an earlier assignment
    backfilled: bool = False    # added only to reach headcount
    supplemental: bool = False


class DaySchedule(BaseModel):
    date: dt.date
    shifts: Dict[ShiftKind, List[Assignment]] = Field(
        default_factory=lambda: {kind: [] for kind in ShiftKind}
    )

    def find(self, employee_id: str) -> Optional[ShiftKind]:
        for kind, assignments in self.shifts.items():
            if any(a.employee_id == employee_id for a in assignments):
                return kind
        return None

    def headcount(self, kind: ShiftKind) -> int:
        return len(self.shifts[kind])


class EmployeeTrackingState(BaseModel):
    total_night_shifts: int = 0
    last_night_shift: Optional[dt.date] = None
    consecutive_work_days: int = 0
    night_shift_balance: int = 0


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AlertCategory(str, Enum):
    STAFFING_SHORTAGE = "STAFFING_SHORTAGE"
    MANDATORY_DAYS_OFF_SHORTAGE = "MANDATORY_DAYS_OFF_SHORTAGE"
    FORCED_OVERRIDE = "FORCED_OVERRIDE"
    SUBSTITUTION_APPLIED = "SUBSTITUTION_APPLIED"
    STAFFING_ADJUSTMENT = "STAFFING_ADJUSTMENT"
    WORKLOAD_IMBALANCE = "WORKLOAD_IMBALANCE"


class Alert(BaseModel):
    category: AlertCategory
    code: str
    severity: Severity
    message: str
    date: Optional[dt.date] = None
    employee_name: Optional[str] = None
    shift: Optional[ShiftKind] = None
    substitute: Optional[str] = None

    # shortage alerts only
    required: Optional[int] = None
    current: Optional[int] = None
    shortfall: Optional[int] = None


class WorkloadReport(BaseModel):
    work_days: Dict[str, int] = {}          # employee_id -> working days
    days_off: Dict[str, int] = {}           # employee_id -> non-working days
    night_shifts: Dict[str, int] = {}       # employee_id -> nights
    role_average_work_days: Dict[Role, float] = {}
    average_night_shifts: float = 0.0
    daily_headcounts: Dict[str, Dict[ShiftKind, int]] = {}  # iso date -> kind -> count


class ProblemInput(BaseModel):
    employees: List[Employee]
    start_date: dt.date
    days: int
    time_off_requests: List[TimeOffRequest] = []
    constraints: ConstraintSet = ConstraintSet()
    shift_rules: Optional[List[ShiftRule]] = None


class ScheduleResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    schedule: Dict[str, DaySchedule]       # iso date -> day buckets
    alerts: List[Alert]
    roster: Dict[str, Dict[str, str]] = {}  # iso date -> employee_id -> shift kind
    workload: WorkloadReport = WorkloadReport()
    summary: dict = {}
