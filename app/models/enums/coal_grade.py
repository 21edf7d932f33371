import enum


class CoalGrade(str, enum.Enum):
    high = "high"
    medium = "medium"
    low = "low"
