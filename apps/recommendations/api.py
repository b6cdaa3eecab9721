"""
Job recommendation API endpoints.
"""
from typing import List, Optional
from uuid import UUID

from django.http import HttpRequest
from ninja import Router
from ninja.errors import HttpError

from apps.identity.decorators import require_auth, require_mentee, require_permission
from apps.identity.permissions import Permissions
from .schemas import RecommendationIn, RecommendationOut, GroupedRecommendationsOut, MarkAppliedIn
from . import services

router = Router(tags=["Recommendations"])


@router.post("/", response={201: List[RecommendationOut]}, auth=None)
def create_recommendations(request: HttpRequest, payload: RecommendationIn):
    """Recommend one job to several assigned mentees."""
    coach = require_permission(request, Permissions.RECOMMENDATIONS_CREATE)
    try:
        created = services.create_recommendations(
            coach, payload.dict(exclude={'mentee_ids'}), payload.mentee_ids
        )
    except PermissionError as e:
        raise HttpError(403, str(e))
    except ValueError as e:
        raise HttpError(400, str(e))
    return 201, created


@router.get("/", response=List[RecommendationOut], auth=None)
def list_recommendations(request: HttpRequest, status: Optional[str] = None, mentee_id: Optional[UUID] = None):
    user = require_auth(request)
    return services.list_recommendations(user, status=status, mentee_id=mentee_id)


@router.get("/grouped", response=GroupedRecommendationsOut, auth=None)
def grouped_recommendations(request: HttpRequest):
    user = require_auth(request)
    return services.grouped(user)


def _get(user, recommendation_id: UUID):
    recommendation = services.get_recommendation(user, recommendation_id)
    if recommendation is None:
        raise HttpError(404, "Recommendation not found")
    return recommendation


@router.post("/{recommendation_id}/applied", response=RecommendationOut, auth=None)
def mark_applied(request: HttpRequest, recommendation_id: UUID, payload: MarkAppliedIn):
    mentee = require_mentee(request)
    return services.mark_applied(_get(mentee, recommendation_id), payload.application_stage or "")


@router.post("/{recommendation_id}/archive", response=RecommendationOut, auth=None)
def archive_recommendation(request: HttpRequest, recommendation_id: UUID):
    user = require_auth(request)
    return services.archive(_get(user, recommendation_id))


@router.post("/{recommendation_id}/reactivate", response=RecommendationOut, auth=None)
def reactivate_recommendation(request: HttpRequest, recommendation_id: UUID):
    user = require_auth(request)
    return services.reactivate(_get(user, recommendation_id))


@router.delete("/{recommendation_id}", response={204: None}, auth=None)
def delete_recommendation(request: HttpRequest, recommendation_id: UUID):
    coach = require_permission(request, Permissions.RECOMMENDATIONS_CREATE)
    if not services.delete_recommendation(coach, recommendation_id):
        raise HttpError(404, "Recommendation not found")
    return 204
