"""FreeBSD host tooling: pkg(8) and service(8) wrappers."""

from common.freebsd.pkg_manager import PkgManager
from common.freebsd.service_manager import ServiceManager

__all__ = ["PkgManager", "ServiceManager"]
