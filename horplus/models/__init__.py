from horplus.models.announcement import Announcement
from horplus.models.billing import Bill, PaymentRecord, PaymentState
from horplus.models.repair import Repair
from horplus.models.tenancy import Room, RoomStatus, Tenant, TenantRole

__all__ = [
    "Announcement",
    "Bill",
    "PaymentRecord",
    "PaymentState",
    "Repair",
    "Room",
    "RoomStatus",
    "Tenant",
    "TenantRole",
]
