"""Taxonomie des erreurs du workflow d'approbation.

Chaque erreur porte un `code` stable et un message destiné à l'utilisateur final,
affiché tel quel par l'interface. La couche API convertit ces exceptions en
enveloppes d'erreur standard (voir `hub.api.errors`).
"""

from __future__ import annotations

from typing import Any


class WorkflowError(Exception):
    """Erreur métier de base."""

    code = "WORKFLOW_ERROR"
    default_message = "Workflow error"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class NotConfigured(WorkflowError):
    """Aucune chaîne d'approbation pour la catégorie de l'asset dans son projet."""

    code = "NOT_CONFIGURED"
    default_message = "No approval chain configured for this content category"


class NoApproversFound(WorkflowError):
    """La chaîne existe mais aucun membre ne détient un rôle requis."""

    code = "NO_APPROVERS_FOUND"
    default_message = "No approvers found for the required roles"


class NotAuthorized(WorkflowError):
    code = "NOT_AUTHORIZED"
    default_message = "Not authorized"


class NotFound(WorkflowError):
    code = "NOT_FOUND"
    default_message = "Not found"


class InvalidTransition(WorkflowError):
    code = "INVALID_TRANSITION"
    default_message = "Invalid status transition"


class AlreadyMember(WorkflowError):
    code = "CONFLICT"
    default_message = "User is already a member of this project"


class ValidationFailed(WorkflowError):
    code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class PersistenceFailure(WorkflowError):
    """Le stockage externe a refusé une lecture/écriture (réseau, contrainte)."""

    code = "PERSISTENCE_FAILURE"
    default_message = "The data store rejected the operation"
