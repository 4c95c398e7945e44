"""
Traduction des erreurs base de données en messages utilisateur.

Codes SQLSTATE retenus :
    23505  violation d'unicité       -> 409
    23503  violation de clé étrangère -> 400
    42702  colonne ambiguë           -> 500
    autre                            -> 400 (message générique)
"""

from __future__ import annotations

import logging
from typing import NoReturn

from fastapi import HTTPException
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
AMBIGUOUS_COLUMN = "42702"

DB_RETRY_MESSAGE = "Erreur de base de données - veuillez réessayer"

MESSAGES: dict[str, dict[str, str]] = {
    "purchase_orders": {
        UNIQUE_VIOLATION: "Un numéro de commande similaire existe déjà",
        FOREIGN_KEY_VIOLATION: "Fournisseur invalide",
        "default": "Erreur lors de la sauvegarde de la commande",
    },
    "purchase_order_items": {
        UNIQUE_VIOLATION: "Ce produit est déjà dans la commande",
        FOREIGN_KEY_VIOLATION: "Produit invalide",
        "default": "Erreur lors de l'ajout du produit à la commande",
    },
    "products": {
        UNIQUE_VIOLATION: "Un produit avec ce SKU existe déjà",
        FOREIGN_KEY_VIOLATION: "Catégorie ou fournisseur invalide",
        "default": "Erreur lors de la création du produit",
    },
    "suppliers": {
        UNIQUE_VIOLATION: "Un fournisseur avec ce nom existe déjà",
        "default": "Erreur lors de la création du fournisseur",
    },
    "categories": {
        UNIQUE_VIOLATION: "Une catégorie avec ce nom existe déjà",
        "default": "Erreur lors de la création de la catégorie",
    },
    "receipts": {
        UNIQUE_VIOLATION: "Un numéro de réception similaire existe déjà",
        FOREIGN_KEY_VIOLATION: "Commande ou article invalide",
        "default": "Erreur lors de la sauvegarde de la réception",
    },
    "tracking_numbers": {
        UNIQUE_VIOLATION: "Ce numéro de suivi existe déjà",
        "default": "Erreur lors de la sauvegarde du numéro de suivi",
    },
}


def db_error_code(exc: Exception) -> str | None:
    """SQLSTATE de l'erreur (psycopg / psycopg2), ou équivalent SQLite."""
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code:
        return str(code)

    text = str(orig if orig is not None else exc)
    if "UNIQUE constraint failed" in text:
        return UNIQUE_VIOLATION
    if "FOREIGN KEY constraint failed" in text:
        return FOREIGN_KEY_VIOLATION
    if "ambiguous column" in text:
        return AMBIGUOUS_COLUMN
    return None


def map_db_error(exc: Exception, collection: str) -> tuple[int, str]:
    code = db_error_code(exc)
    messages = MESSAGES.get(collection, {})

    if code == AMBIGUOUS_COLUMN:
        return 500, DB_RETRY_MESSAGE
    if code == UNIQUE_VIOLATION and code in messages:
        return 409, messages[code]
    if code == FOREIGN_KEY_VIOLATION and code in messages:
        return 400, messages[code]
    return 400, messages.get("default", "Erreur lors de la sauvegarde")


def raise_db_error(db: Session, exc: Exception, collection: str) -> NoReturn:
    db.rollback()
    status_code, message = map_db_error(exc, collection)
    logger.exception("write on %s failed (code=%s)", collection, db_error_code(exc))
    raise HTTPException(status_code=status_code, detail=message) from exc


def commit_or_raise(db: Session, collection: str) -> None:
    try:
        db.commit()
    except (IntegrityError, DBAPIError) as e:
        raise_db_error(db, e, collection)
