from .auth import User, SessionToken
from .inventory import Supplier, Material, SupplierDelivery
from .knowledge import LessonLearned, KnowledgeDocument
from .production import ProductionLog, ProductionWaste

__all__ = [
    'User', 'SessionToken',
    'Supplier', 'Material', 'SupplierDelivery',
    'LessonLearned', 'KnowledgeDocument',
    'ProductionLog', 'ProductionWaste',
]
