import os
from dataclasses import dataclass, field, fields

from .errors import InvalidArgument

# ------------------------------
# CONFIGURATION
# ------------------------------

MONGO_URI = os.environ.get("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB = os.environ.get("MONGO_DB", "schedule_db")

HARI_LIST = ["SENIN", "SELASA", "RABU", "KAMIS", "JUMAT", "SABTU"]
WORKING_DAYS = ["SENIN", "SELASA", "RABU", "KAMIS", "JUMAT"]

MAX_SKS_PER_STUDENT = 24     # Batas SKS mahasiswa per semester
CLASS_SIZE = 50              # Maksimal mahasiswa per kelas
MAX_SECTIONS = 2             # Maksimal kelas (A/B) per mata kuliah
MEETINGS_PER_TERM = 12
MAX_ATTEMPTS = 100           # Percobaan slot per kelas sebelum dianggap gagal
LECTURERS_PER_SECTION = 2

GENERATIONS = 50
ELITE_SIZE = 10
MUTATION_RATE = 0.1

UMUM = "UMUM"                # Bidang minat umum, boleh diajar semua dosen
CLASSROOM_KEYWORDS = ("ruang kuliah", "kelas")


@dataclass
class SchedulingConfig:
    max_sks_per_student: int = MAX_SKS_PER_STUDENT
    class_size: int = CLASS_SIZE
    max_sections: int = MAX_SECTIONS
    meetings_per_term: int = MEETINGS_PER_TERM
    max_attempts: int = MAX_ATTEMPTS
    lecturers_per_section: int = LECTURERS_PER_SECTION
    generations: int = GENERATIONS
    elite_size: int = ELITE_SIZE
    mutation_rate: float = MUTATION_RATE
    # None means "one individual per course"
    population: int = None
    days: list = field(default_factory=lambda: list(WORKING_DAYS))

    def __post_init__(self):
        for name in ("max_sks_per_student", "class_size", "max_sections",
                     "meetings_per_term", "max_attempts", "lecturers_per_section"):
            if getattr(self, name) < 1:
                raise InvalidArgument(f"{name} must be positive, got {getattr(self, name)}")
        if self.generations < 0 or self.elite_size < 0:
            raise InvalidArgument("generations and elite_size cannot be negative")
        if not 0.0 <= self.mutation_rate <= 1.0:
            raise InvalidArgument(f"mutation_rate must be within [0, 1], got {self.mutation_rate}")
        unknown = [d for d in self.days if d not in HARI_LIST]
        if not self.days or unknown:
            raise InvalidArgument(f"Invalid days configuration: {self.days}")

    @property
    def max_students_per_course(self):
        return self.class_size * self.max_sections

    @classmethod
    def from_env(cls, environ=None):
        """Build a config from PENJADWALAN_* variables, e.g. PENJADWALAN_MAX_SKS_PER_STUDENT=22."""
        environ = os.environ if environ is None else environ
        values = {}
        for f in fields(cls):
            raw = environ.get(f"PENJADWALAN_{f.name.upper()}")
            if raw is None or raw == "":
                continue
            try:
                if f.name == "days":
                    values[f.name] = [d.strip().upper() for d in raw.split(",") if d.strip()]
                elif f.name == "mutation_rate":
                    values[f.name] = float(raw)
                else:
                    values[f.name] = int(raw)
            except ValueError:
                raise InvalidArgument(f"Invalid value for PENJADWALAN_{f.name.upper()}: {raw!r}")
        return cls(**values)
