import enum


class UserRole(str, enum.Enum):
    admin = "admin"
    operator_produksi = "operator_produksi"
    operator_barging = "operator_barging"
    auditor = "auditor"
    viewer = "viewer"
