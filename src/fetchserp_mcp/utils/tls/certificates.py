"""TLS certificate acquisition for HTTPS mode.

Certificates are produced by external tools: ``openssl`` for self-signed
development certificates and ``certbot`` for Let's Encrypt. Both write PEM
files that uvicorn loads through ``ssl_keyfile`` and ``ssl_certfile``.
"""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_CERT_DIR = "./certs"
DEFAULT_LETSENCRYPT_DIR = "./letsencrypt"


class CertificateError(Exception):
    """Raised when a certificate cannot be created or obtained"""


@dataclass(frozen=True)
class CertificatePaths:
    keyfile: str
    certfile: str


def _run(cmd, description):
    """Run an external command, raising CertificateError on failure"""
    executable = cmd[0]
    if shutil.which(executable) is None:
        raise CertificateError(
            f"{description} failed: '{executable}' is not installed or not on PATH"
        )

    logger.info(f"{description}...")
    try:
        result = subprocess.run(cmd, check=True, capture_output=True, text=True)
    except subprocess.CalledProcessError as e:
        logger.error(f"❌ {description} failed!")
        if e.stdout:
            logger.error(e.stdout)
        if e.stderr:
            logger.error(e.stderr)
        raise CertificateError(f"{description} failed: {e.stderr or e}") from e

    if result.stdout:
        logger.debug(result.stdout)
    logger.info(f"✅ {description} completed successfully")


def create_self_signed_certs(domain, cert_dir=DEFAULT_CERT_DIR) -> CertificatePaths:
    """Create (or reuse) a self-signed certificate for local development"""
    cert_path = Path(cert_dir)
    paths = CertificatePaths(
        keyfile=str(cert_path / "key.pem"), certfile=str(cert_path / "cert.pem")
    )

    if os.path.exists(paths.keyfile) and os.path.exists(paths.certfile):
        logger.info("Using existing self-signed certificates")
        return paths

    cert_path.mkdir(parents=True, exist_ok=True)

    logger.info("Creating self-signed certificates for local development...")
    _run(
        [
            "openssl",
            "req",
            "-x509",
            "-newkey",
            "rsa:4096",
            "-keyout",
            paths.keyfile,
            "-out",
            paths.certfile,
            "-days",
            "365",
            "-nodes",
            "-subj",
            f"/C=US/ST=State/L=City/O=Organization/CN={domain}",
        ],
        "Self-signed certificate generation",
    )
    return paths


def letsencrypt_paths(domain, config_dir=DEFAULT_LETSENCRYPT_DIR) -> CertificatePaths:
    live_dir = Path(config_dir) / "live" / domain
    return CertificatePaths(
        keyfile=str(live_dir / "privkey.pem"), certfile=str(live_dir / "fullchain.pem")
    )


def obtain_letsencrypt_certs(
    domain, email, staging=False, config_dir=DEFAULT_LETSENCRYPT_DIR
) -> CertificatePaths:
    """Obtain (or reuse) a Let's Encrypt certificate via certbot's standalone HTTP-01 challenge.

    Port 80 must be free and the domain's DNS must point at this host while
    certbot runs. Renewal is left to ``certbot renew`` with the same
    ``--config-dir``.
    """
    paths = letsencrypt_paths(domain, config_dir)
    if os.path.exists(paths.keyfile) and os.path.exists(paths.certfile):
        logger.info(f"Using existing Let's Encrypt certificate for {domain}")
        return paths

    base = Path(config_dir)
    cmd = [
        "certbot",
        "certonly",
        "--standalone",
        "--non-interactive",
        "--agree-tos",
        "--email",
        email,
        "-d",
        domain,
        "--config-dir",
        str(base),
        "--work-dir",
        str(base / "work"),
        "--logs-dir",
        str(base / "logs"),
    ]
    if staging:
        cmd.append("--staging")

    logger.info(f"🔒 Requesting Let's Encrypt certificate for {domain}")
    logger.info(f"Email: {email}")
    logger.info(f"Staging: {staging}")
    _run(cmd, "Let's Encrypt certificate request")

    if not (os.path.exists(paths.keyfile) and os.path.exists(paths.certfile)):
        raise CertificateError(
            f"certbot finished but no certificate was found under {Path(paths.certfile).parent}"
        )
    return paths
