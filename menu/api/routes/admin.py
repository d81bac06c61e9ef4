import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from menu.api.deps import get_event_bus, get_menu_cache, get_repository, no_store, require_admin
from menu.events.Event_Bus import EventBus
from menu.infra.Menu_Repository import MenuRepository
from menu.infra.pdf_utils import generate_pdf_for_menu
from menu.logic.menus.workflow import (
    create_template_with_dishes,
    generate_from_rotation,
    generate_weekly_menu,
    menu_with_day_menus,
    reorder_menu_item,
    update_menu_item,
    update_menu_status,
)
from menu.logic.schedule.grouping import group_menu_items_by_day
from menu.utilities.cache import SimpleCache
from menu.utilities.constants import NO_STORE_HEADERS
from menu.utilities.validators import (
    DishInput,
    GenerateWeeklyMenuInput,
    MenuStatus,
    MenuTemplateInput,
    MenuTemplateWithDishesInput,
    ReorderWeeklyMenuItemInput,
    TemplateDishesInput,
    UpdateWeeklyMenuItemInput,
    UpdateWeeklyMenuStatusInput,
)

router = APIRouter(prefix="/api/admin", dependencies=[Depends(require_admin), Depends(no_store)])
logger = logging.getLogger(__name__)


def _load_menu(repo: MenuRepository, menu_id: str):
    menu = repo.get_weekly_menu(menu_id)
    if menu is None:
        raise HTTPException(status_code=404, detail="Weekly menu not found.", headers=NO_STORE_HEADERS)
    return menu


# -------------------- Dishes --------------------
@router.get("/dishes")
def list_dishes(repo: MenuRepository = Depends(get_repository)):
    return {"dishes": [d.to_dict() for d in repo.list_dishes()]}


@router.post("/dishes")
def add_dish(payload: DishInput, repo: MenuRepository = Depends(get_repository)):
    dish = repo.add_dish(payload.model_dump())
    return {"dish": dish.to_dict()}


# -------------------- Templates --------------------
@router.get("/menu-templates")
def list_templates(include_dishes: bool = Query(default=False),
                   repo: MenuRepository = Depends(get_repository)):
    templates = repo.list_templates(include_dishes=include_dishes)
    return {"templates": [t.to_dict(include_dishes=include_dishes) for t in templates]}


@router.post("/menu-templates")
def add_template(payload: MenuTemplateInput, repo: MenuRepository = Depends(get_repository)):
    template = repo.add_template(payload.model_dump())
    return {"template": template.to_dict(include_dishes=False)}


@router.post("/menu-templates/with-dishes")
def add_template_with_dishes(payload: MenuTemplateWithDishesInput,
                             repo: MenuRepository = Depends(get_repository)):
    data = payload.model_dump(exclude={"dishes"})
    dishes = [{**d.model_dump(), "dish_id": str(d.dish_id)} for d in payload.dishes]
    template = create_template_with_dishes(repo, data, dishes)
    return {"template": template.to_dict()}


@router.post("/template-dishes")
def upsert_template_dishes(payload: TemplateDishesInput, repo: MenuRepository = Depends(get_repository)):
    rows = [{**d.model_dump(), "template_id": str(d.template_id), "dish_id": str(d.dish_id)}
            for d in payload.dishes]
    saved = repo.upsert_template_dishes(rows)
    return {"success": True, "dishes": [td.to_dict(include_dish=False) for td in saved]}


# -------------------- Weekly menus --------------------
@router.get("/weekly-menus")
def list_weekly_menus(status: Optional[MenuStatus] = Query(default=None),
                      repo: MenuRepository = Depends(get_repository)):
    return {"menus": [m.to_dict(include_items=False) for m in repo.list_weekly_menus(status=status)]}


@router.post("/menus/generate")
def generate_menu(payload: GenerateWeeklyMenuInput,
                  repo: MenuRepository = Depends(get_repository),
                  bus: EventBus = Depends(get_event_bus),
                  cache: SimpleCache = Depends(get_menu_cache)):
    if payload.template_ids is not None:
        menu, created = generate_from_rotation(
            repo, payload.week_start_date, [str(t) for t in payload.template_ids], bus=bus)
    else:
        menu, created = generate_weekly_menu(repo, str(payload.template_id), payload.week_start_date, bus=bus)
    if created:
        cache.clear()
    return {"menu": menu.to_dict(include_items=False), "created": created}


@router.post("/menus/status")
def set_menu_status(payload: UpdateWeeklyMenuStatusInput,
                    repo: MenuRepository = Depends(get_repository),
                    bus: EventBus = Depends(get_event_bus),
                    cache: SimpleCache = Depends(get_menu_cache)):
    menu = update_menu_status(repo, str(payload.weekly_menu_id), payload.status, bus=bus)
    cache.clear()
    return {"menu": {"id": menu.id, "status": menu.status, "published_at": menu.published_at}}


@router.get("/weekly-menus/{menu_id}/day-menus")
def weekly_menu_day_menus(menu_id: str, repo: MenuRepository = Depends(get_repository)):
    return {"menu": menu_with_day_menus(_load_menu(repo, menu_id))}


@router.get("/weekly-menus/{menu_id}/export-pdf")
def export_menu_pdf(menu_id: str, repo: MenuRepository = Depends(get_repository)):
    menu = _load_menu(repo, menu_id)
    day_menus = group_menu_items_by_day(menu.items, menu.week_start_date) if menu.week_start_date else []
    pdf_bytes = generate_pdf_for_menu(menu, day_menus)
    filename = f"weekly_menu_{menu.week_start_date or menu.id}.pdf"
    logger.info("Exported weekly menu %s as PDF (%d bytes)", menu.id, len(pdf_bytes))
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}", **NO_STORE_HEADERS},
    )


# -------------------- Weekly menu items --------------------
@router.patch("/weekly-menu-items/{item_id}")
def patch_menu_item(item_id: str, payload: UpdateWeeklyMenuItemInput,
                    repo: MenuRepository = Depends(get_repository),
                    bus: EventBus = Depends(get_event_bus),
                    cache: SimpleCache = Depends(get_menu_cache)):
    item = update_menu_item(repo, item_id, payload.changes(), bus=bus)
    cache.clear()
    return {"item": item.to_dict()}


@router.post("/weekly-menu-items/reorder")
def reorder_items(payload: ReorderWeeklyMenuItemInput,
                  repo: MenuRepository = Depends(get_repository),
                  bus: EventBus = Depends(get_event_bus),
                  cache: SimpleCache = Depends(get_menu_cache)):
    items = reorder_menu_item(repo, str(payload.item_id), payload.direction, bus=bus)
    cache.clear()
    return {"items": [i.to_dict() for i in items]}
