"""Course scheduling engine: conflict detection, fair student distribution, genetic search and meeting dates."""
from .config import SchedulingConfig
from .conflicts import Conflict, ConflictDetector, build_conflict_report
from .distribution import DistributionPlan, FairDistributionPlanner, Section, divide_into_sections
from .eligibility import lecturer_can_teach, student_can_take_course
from .errors import InvalidArgument, SchedulingError, StoreError
from .genetic import ScheduleGenerator
from .meetings import generate_meeting_dates, meeting_update_eligibility
from .models import Assignment, Course, Lecturer, Meeting, Room, Semester, Shift, Student, Term
from .service import AssignmentResult, GenerationSummary, SchedulingService
from .store import MemoryStore, MongoStore

__version__ = "0.1.0"
