"""
Configuration constants for the domain allowlist firewall.

This module contains all configuration values, file paths, and hardcoded
settings used throughout the firewall manager. Values that operators may want
to change are read from the environment (or a .env file in the project root).
"""
import os
from dotenv import load_dotenv

# Load .env file from project root
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
load_dotenv(os.path.join(PROJECT_ROOT, ".env"))

# File Paths
DOMAINS_FILE = os.getenv("FIREWALL_DOMAINS_FILE", "/etc/firewall/allowed-domains.txt")
AUDIT_LOG_FILE = os.getenv("FIREWALL_AUDIT_LOG", "/var/log/firewall-audit.log")
LOCK_FILE = os.getenv("FIREWALL_LOCK_FILE", "/run/firewall.lock")
CRON_FILE = os.getenv("FIREWALL_CRON_FILE", "/etc/cron.d/domain-firewall")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("FIREWALL_LOG_FILE")

# Allow-set (ipset) Configuration
ALLOWSET_NAME = os.getenv("FIREWALL_SET_NAME", "allowed-domains")
ALLOWSET_TIMEOUT = int(os.getenv("FIREWALL_SET_TIMEOUT", "3600"))  # Seconds before an entry expires

# DNS Resolution
RESOLVER_WORKERS = int(os.getenv("FIREWALL_RESOLVER_WORKERS", "10"))  # Concurrent lookups per sync
DNS_TIMEOUT = float(os.getenv("FIREWALL_DNS_TIMEOUT", "5"))  # Lifetime of a single lookup
NAMESERVERS = [ns.strip() for ns in os.getenv("FIREWALL_NAMESERVERS", "").split(",") if ns.strip()]

# Diagnostics
PROBE_TIMEOUT = min(max(float(os.getenv("FIREWALL_PROBE_TIMEOUT", "5")), 5.0), 10.0)
DEFAULT_TEST_DOMAIN = os.getenv("FIREWALL_TEST_DOMAIN", "github.com")

# Scheduled refresh
DEFAULT_REFRESH_MINUTES = 30

# iptables Configuration
EGRESS_CHAIN = "FW-EGRESS"  # Hooked from OUTPUT
INGRESS_CHAIN = "FW-INGRESS"  # Hooked from INPUT
EGRESS_HOOK = "OUTPUT"
INGRESS_HOOK = "INPUT"
ALLOWED_PORTS = (80, 443, 22)  # TCP ports reachable on allowed domains
DNS_PORT = 53
LOG_PREFIX = "[FIREWALL-DROP] "  # Prefix for kernel log entries

# Required system tools
REQUIRED_TOOLS = ("iptables", "ipset")

# Private IP Ranges (RFC 1918 + loopback)
# Traffic to and from these ranges bypasses the allowlist
PRIVATE_IP_RANGES = (
    "10.0.0.0/8",          # Class A private
    "172.16.0.0/12",       # Class B private
    "192.168.0.0/16",      # Class C private
    "127.0.0.0/8",         # Loopback
)
