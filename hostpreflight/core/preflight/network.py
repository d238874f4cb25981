"""
Network preflight checks — NetworkManager, dnsmasq and systemd-resolved.

The CRC virtual network resolves ``*.crc.testing`` and
``*.apps-crc.testing`` through 192.168.130.11. On hosts where
NetworkManager runs its own dnsmasq, that is done with a dnsmasq
``server=`` drop-in; on hosts using systemd-resolved, a NetworkManager
dispatcher script sets per-link DNS on the ``crc`` bridge.
"""

from __future__ import annotations

import logging

from hostpreflight.core.host import Host
from hostpreflight.core.models.check import CheckRegistry, validate_registry
from hostpreflight.core.preflight.errors import DetectionFailed
from hostpreflight.core.preflight.patterns import (
    check_service_state,
    executable_check,
    file_content_check,
    require_executable,
    service_state_check,
)

logger = logging.getLogger(__name__)

NETWORK_MANAGER_SERVICE = "NetworkManager"
NETWORK_MANAGER_CLI = "nmcli"

NM_ROOT = "/etc/NetworkManager"

CRC_DNSMASQ_CONFIG_PATH = f"{NM_ROOT}/dnsmasq.d/crc.conf"
CRC_DNSMASQ_CONFIG = """\
server=/apps-crc.testing/192.168.130.11
server=/crc.testing/192.168.130.11
"""

CRC_NM_CONFIG_PATH = f"{NM_ROOT}/conf.d/crc-nm-dnsmasq.conf"
CRC_NM_CONFIG = """\
[main]
dns=dnsmasq
"""

CRC_NM_DISPATCHER_PATH = f"{NM_ROOT}/dispatcher.d/pre-up.d/99-crc.sh"
CRC_NM_DISPATCHER_CONFIG = """\
#!/bin/sh
# This is a NetworkManager dispatcher script to configure split DNS for
# the 'crc' libvirt network.
# The corresponding crc bridge is recreated each time the system reboots, so
# it cannot be configured permanently through NetworkManager.
# Changing DNS settings with nmcli requires the connection to go down/up,
# so we directly make the change using resolvectl

export LC_ALL=C

if [ "$1" = crc ]; then
        resolvectl domain "$1" ~testing
        resolvectl dns "$1" 192.168.130.11
        resolvectl default-route "$1" false
fi

exit 0
"""

CONFIG_MODE = 0o644
SCRIPT_MODE = 0o755

# Config files only exist when NetworkManager does
_nm_installed = require_executable(NETWORK_MANAGER_CLI, label="NetworkManager")


NM_CHECKS: CheckRegistry = (
    service_state_check(
        "check-systemd-networkd-running",
        "systemd-networkd.service",
        want_running=False,
        fix_description="network configuration with systemd-networkd is not supported",
    ),
    executable_check(
        "check-network-manager-installed",
        NETWORK_MANAGER_CLI,
        label="NetworkManager",
        fix_description="NetworkManager is required and must be installed manually",
    ),
    service_state_check(
        "check-network-manager-running",
        "NetworkManager.service",
        check_description="Checking if NetworkManager service is running",
        fix_description="NetworkManager is required. Please make sure it is installed and running manually",
    ),
)

DNSMASQ_CHECKS: CheckRegistry = (
    file_content_check(
        "check-network-manager-config",
        CRC_NM_CONFIG_PATH,
        CRC_NM_CONFIG,
        CONFIG_MODE,
        NETWORK_MANAGER_SERVICE,
        fix_description="Writing Network Manager config for crc",
        precondition=_nm_installed,
    ),
    file_content_check(
        "check-crc-dnsmasq-file",
        CRC_DNSMASQ_CONFIG_PATH,
        CRC_DNSMASQ_CONFIG,
        CONFIG_MODE,
        NETWORK_MANAGER_SERVICE,
        fix_description="Writing dnsmasq config for crc",
        precondition=_nm_installed,
    ),
)

RESOLVED_CHECKS: CheckRegistry = (
    service_state_check(
        "check-systemd-resolved-running",
        "systemd-resolved.service",
        check_description="Checking if the systemd-resolved service is running",
        fix_description="systemd-resolved is required on this distribution. "
        "Please make sure it is installed and running manually",
    ),
    file_content_check(
        "check-crc-nm-dispatcher-file",
        CRC_NM_DISPATCHER_PATH,
        CRC_NM_DISPATCHER_CONFIG,
        SCRIPT_MODE,
        NETWORK_MANAGER_SERVICE,
        fix_description="Writing NetworkManager dispatcher file for crc",
        precondition=_nm_installed,
    ),
)

REGISTRIES: dict[str, CheckRegistry] = {
    "network-manager": NM_CHECKS,
    "dnsmasq": DNSMASQ_CHECKS,
    "systemd-resolved": RESOLVED_CHECKS,
}

validate_registry(*REGISTRIES.values())


def using_systemd_resolved(host: Host) -> bool:
    """Whether the host resolves names through systemd-resolved."""
    try:
        check_service_state(host, "systemd-resolved.service")
    except DetectionFailed as e:
        logger.debug("Not using systemd-resolved: %s", e)
        return False
    return True


def network_checks(host: Host) -> CheckRegistry:
    """Checks that apply to this host's DNS setup, in run order."""
    if using_systemd_resolved(host):
        return NM_CHECKS + RESOLVED_CHECKS
    return NM_CHECKS + DNSMASQ_CHECKS


def all_network_checks() -> CheckRegistry:
    """Every network check, whichever DNS setup is in use.

    Used for cleanup, so files written under either setup are removed.
    """
    return NM_CHECKS + DNSMASQ_CHECKS + RESOLVED_CHECKS


def find_check(check_id: str):
    """Look up a network check by id, or None."""
    for check in all_network_checks():
        if check.config_key_suffix == check_id:
            return check
    return None
