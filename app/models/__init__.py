# Masters
from app.models.masters.contractor_models import Contractor
from app.models.masters.jetty_models import Jetty

# Users
from app.models.users.user_models import User

# Stock ledger
from app.models.stock.stock_balance_models import StockBalance
from app.models.stock.stock_adjustment_models import StockAdjustment

# Operations
from app.models.operations.production_models import ProductionRecord
from app.models.operations.barging_models import BargingRecord

# Support
from app.models.support.audit_models import AuditLog
