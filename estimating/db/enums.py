# estimating/db/enums.py
import enum


# Estimate related enums
class EstimateStatus(enum.Enum):
    draft = "draft"
    generated = "generated"
    finalized = "finalized"


# AuditLog related enums
class AuditEntityType(enum.Enum):
    Estimate = "estimate"
    EstimateVersion = "estimate_version"
    Section = "section"
    LineItem = "line_item"
    Assembly = "assembly"
    Bundle = "bundle"
    PurchaseOrder = "purchase_order"
    WorkOrder = "work_order"


class AuditAction(enum.Enum):
    create = "create"
    update = "update"
    delete = "delete"
    system = "system"
