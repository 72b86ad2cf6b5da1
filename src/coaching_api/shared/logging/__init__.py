from coaching_api.shared.logging.audit_logger import AuditLogger

__all__ = ["AuditLogger"]
