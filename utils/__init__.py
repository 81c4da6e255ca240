# Utils package for Booth backend

from .service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok


__all__ = ["BaseService", "ErrorCodes", "ServiceResult", "service_err", "service_ok"]
