# attendease/catalog.py
from __future__ import annotations

import logging

from .errors import UserNotFoundError
from .logic_models import AppState, CreditPackage

log = logging.getLogger(__name__)


def _validate(pkg: CreditPackage) -> CreditPackage:
    if not pkg.name.strip():
        raise ValueError("Package name is required.")
    if pkg.credits < 1:
        raise ValueError("A package must contain at least 1 credit.")
    if pkg.price < 0:
        raise ValueError("Price cannot be negative.")
    return pkg


def get_package(state: AppState, package_id: str) -> CreditPackage:
    pkg = state.find_package(package_id)
    if not pkg:
        raise UserNotFoundError("Credit package not found.")
    return pkg


def add_package(state: AppState, pkg: CreditPackage) -> CreditPackage:
    state.packages.append(_validate(pkg))
    log.info(f"[catalog] added {pkg.id} '{pkg.name}'")
    return pkg


def update_package(state: AppState, pkg: CreditPackage) -> CreditPackage:
    get_package(state, pkg.id)
    _validate(pkg)
    state.packages = [pkg if p.id == pkg.id else p for p in state.packages]
    log.info(f"[catalog] updated {pkg.id}")
    return pkg


def delete_package(state: AppState, package_id: str) -> None:
    get_package(state, package_id)
    state.packages = [p for p in state.packages if p.id != package_id]
    log.info(f"[catalog] deleted {package_id}")
