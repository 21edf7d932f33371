import enum


class AdjustmentReason(str, enum.Enum):
    manual_correction = "manual_correction"
    waste = "waste"
    spillage = "spillage"
    measurement_error = "measurement_error"
    other = "other"
