"""
Project Service

Listing, CRUD, view/like counters and dashboard stats for projects.
"""

import logging
from typing import Any, Dict, List, Optional

from app.core.errors import ForbiddenError, NotFoundError
from app.crud import crud_user
from app.schemas.project import Project, ProjectCreate, ProjectUpdate
from app.schemas.user import User
from app.services.common import (
    apply_updates,
    ensure_owner_or_admin,
    paginate,
    parse_object_id,
    total_pages,
    update_fields,
)
from app.tools.file_uploader import StorageBackend, discard_asset
from app.tools.serializers import owner_summary, serialize_document

logger = logging.getLogger(__name__)

# blank values in an update clear these
URL_FIELDS = ("githubUrl", "liveUrl", "demoUrl")


def build_project_query(
    category: Optional[str] = None,
    featured: Optional[bool] = None,
    search: Optional[str] = None,
) -> Dict[str, Any]:
    query: Dict[str, Any] = {"isPublic": True}
    if category and category != "all":
        query["category"] = category
    if featured:
        query["featured"] = True
    if search and search.strip():
        query["$text"] = {"$search": search.strip()}
    return query


async def serialize_projects(projects: List[Project], owner_fields=("name", "avatar")) -> List[Dict[str, Any]]:
    owners = await crud_user.get_users_by_ids(p.user for p in projects)
    items = []
    for project in projects:
        data = serialize_document(project)
        data["user"] = owner_summary(owners.get(str(project.user)), owner_fields) or str(project.user)
        items.append(data)
    return items


async def serialize_project(project: Project, owner_fields=("name", "avatar")) -> Dict[str, Any]:
    return (await serialize_projects([project], owner_fields))[0]


async def get_project_or_404(project_id: str) -> Project:
    project = await Project.get(parse_object_id(project_id, "project"))
    if project is None:
        raise NotFoundError("Project not found")
    return project


async def list_projects(
    category: Optional[str],
    featured: Optional[bool],
    search: Optional[str],
    page: int,
    limit: int,
) -> Dict[str, Any]:
    query = build_project_query(category, featured, search)
    projects, total = await paginate(Project, query, "-createdAt", page, limit)
    return {
        "projects": await serialize_projects(projects),
        "totalPages": total_pages(total, limit),
        "currentPage": page,
        "total": total,
    }


async def list_user_projects(user_id: str) -> List[Dict[str, Any]]:
    owner_id = parse_object_id(user_id, "user")
    projects = await Project.find({"user": owner_id, "isPublic": True}).sort("-createdAt").to_list()
    return await serialize_projects(projects)


async def view_project(project_id: str) -> Dict[str, Any]:
    """Fetch one project; every successful fetch counts as one view."""
    project = await get_project_or_404(project_id)
    project.views = (project.views or 0) + 1
    await project.save()
    return await serialize_project(project, ("name", "avatar", "bio", "location"))


async def create_project(user: User, payload: ProjectCreate) -> Dict[str, Any]:
    fields = payload.model_dump(exclude_none=True)
    project = Project(**fields, user=user.id)
    await project.insert()
    logger.info("User %s created project %s", user.id, project.id)
    return await serialize_project(project)


async def get_owned_project(user: User, project_id: str) -> Project:
    """Load a project the caller may modify: its owner or an admin."""
    project = await get_project_or_404(project_id)
    ensure_owner_or_admin(project, user)
    return project


async def update_project(user: User, project: Project, payload: ProjectUpdate, storage: StorageBackend) -> Dict[str, Any]:
    ensure_owner_or_admin(project, user)
    updates = update_fields(payload, clearable=URL_FIELDS)

    superseded: List[str] = []
    new_image = updates.get("image")
    if new_image and project.image and new_image != project.image:
        superseded.append(project.image)
    if "images" in updates:
        kept = updates["images"] or []
        superseded.extend(img for img in project.images if img not in kept)

    apply_updates(project, updates)
    await project.save()

    for url in superseded:
        await discard_asset(storage, url)
    return await serialize_project(project)


async def delete_project(user: User, project_id: str, storage: StorageBackend) -> None:
    project = await get_owned_project(user, project_id)

    await discard_asset(storage, project.image)
    for url in project.images:
        await discard_asset(storage, url)
    await project.delete()
    logger.info("User %s deleted project %s", user.id, project_id)


async def like_project(project_id: str) -> int:
    # no per-user dedup: every call adds one like
    project = await get_project_or_404(project_id)
    project.likes = (project.likes or 0) + 1
    await project.save()
    return project.likes


async def toggle_featured(user: User, project_id: str) -> Dict[str, Any]:
    if user.role != "admin":
        raise ForbiddenError("Not authorized. Admin access required.")
    project = await get_project_or_404(project_id)
    project.featured = not project.featured
    await project.save()
    data = await serialize_project(project)
    data["message"] = f"Project {'featured' if project.featured else 'unfeatured'} successfully"
    return data


async def project_stats(user: User) -> Dict[str, Any]:
    match = {"$match": {"user": user.id}}
    totals = await Project.aggregate([
        match,
        {
            "$group": {
                "_id": None,
                "totalProjects": {"$sum": 1},
                "totalViews": {"$sum": "$views"},
                "totalLikes": {"$sum": "$likes"},
                "featuredProjects": {"$sum": {"$cond": ["$featured", 1, 0]}},
            }
        },
    ]).to_list()
    category_stats = await Project.aggregate([
        match,
        {"$group": {"_id": "$category", "count": {"$sum": 1}}},
    ]).to_list()

    stats = {"totalProjects": 0, "totalViews": 0, "totalLikes": 0, "featuredProjects": 0}
    if totals:
        stats.update({k: v for k, v in totals[0].items() if k != "_id"})
    return {"stats": stats, "categoryStats": category_stats}
