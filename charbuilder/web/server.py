"""FastAPI server exposing reference lookups and stats calculation."""

import logging
from typing import Any, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from ..characters.models import Character
from ..characters.recalc import StatsRecalculator
from ..config import AppConfig
from ..data.repository import ReferenceRepository
from ..errors import UnknownEquipmentType
from ..rules.equipment import EquipmentExpander
from ..rules.resolver import Category, TagResolver, is_not_found

logger = logging.getLogger(__name__)

PRELOAD_CATEGORIES = ["spells", "items", "conditions", "skills", "backgrounds", "variantrules", "features"]
ESSENTIAL_CATEGORIES = ["conditions", "skills"]


# Pydantic models
class EquipmentRequest(BaseModel):
    equipment: List[str] = Field(default_factory=list)


class StatsRequest(BaseModel):
    """Character document in the external camelCase format."""

    model_config = {"extra": "allow"}

    name: str = ""
    race: str = ""
    subrace: Optional[str] = None
    className: str = ""
    subclass: Optional[str] = None
    background: str = ""
    level: Optional[int] = 1
    abilityScores: Optional[dict[str, Any]] = Field(default_factory=dict)
    classSkillChoices: List[str] = Field(default_factory=list)
    backgroundSkillChoices: List[str] = Field(default_factory=list)
    raceSkillChoices: List[str] = Field(default_factory=list)
    equipment: List[str] = Field(default_factory=list)


def _require(found: Any, detail: str) -> Any:
    if not found:
        raise HTTPException(status_code=404, detail=detail)
    return found


def create_app(repository: ReferenceRepository, config: AppConfig | None = None) -> FastAPI:
    """Create the API application over an already built repository."""
    config = config or AppConfig()
    resolver = TagResolver(repository)
    expander = EquipmentExpander(resolver)
    files = repository.files

    app = FastAPI(title="Character Builder API")
    app.state.repository = repository
    app.state.resolver = resolver

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def require_document(filename: str, what: str) -> None:
        if not repository.has_document(filename):
            raise HTTPException(status_code=500, detail=f"Could not load {what} data")

    @app.get("/api/health")
    async def health():
        """Health check."""
        return {"status": "ok"}

    @app.get("/api/data/lookup/{category}/{name:path}")
    async def lookup(category: str, name: str):
        """Resolve a reference tag to its record."""
        record = resolver.resolve(category, name)
        if is_not_found(record) and Category.coerce(category) is Category.ITEM:
            raise HTTPException(status_code=404, detail="Item not found")
        return record

    # -- races ---------------------------------------------------------------

    @app.get("/api/data/races/phb")
    async def list_races():
        """Get core rulebook races."""
        require_document(files.races, "race")
        return repository.list_races()

    @app.get("/api/data/races/{race_name}/subraces")
    async def list_subraces(race_name: str):
        """Get core rulebook subraces of a race."""
        require_document(files.races, "subrace")
        return repository.list_subraces(race_name)

    @app.get("/api/data/races/{name}")
    async def get_race(name: str):
        """Get a race by name."""
        require_document(files.races, "race")
        return _require(repository.get_race(name), "Race not found")

    @app.get("/api/data/subraces/{name}")
    async def get_subrace(name: str):
        """Get a subrace by name."""
        require_document(files.races, "subrace")
        return _require(repository.get_subrace(name), "Subrace not found")

    # -- classes -------------------------------------------------------------

    @app.get("/api/data/classes/phb")
    async def list_classes():
        """Get core rulebook classes."""
        return repository.list_classes()

    @app.get("/api/data/classes/{name}/subclasses")
    async def list_subclasses(name: str):
        """Get core rulebook subclasses of a class."""
        if name.lower() not in repository.config.class_names:
            raise HTTPException(status_code=404, detail="Class not found")
        return repository.list_subclasses(name)

    @app.get("/api/data/classes/{name}")
    async def get_class(name: str):
        """Get a class by name, with its feature arrays."""
        return _require(repository.get_class(name), "Class not found")

    @app.get("/api/data/subclasses/{class_name}/{subclass_name}")
    async def get_subclass(class_name: str, subclass_name: str):
        """Get a subclass by class and name."""
        return _require(repository.get_subclass(class_name, subclass_name), "Subclass not found")

    # -- backgrounds and feats -----------------------------------------------

    @app.get("/api/data/backgrounds/phb")
    async def list_backgrounds():
        """Get core rulebook backgrounds."""
        require_document(files.backgrounds, "background")
        return repository.list_backgrounds()

    @app.get("/api/data/backgrounds/{name}")
    async def get_background(name: str):
        """Get a background by name."""
        require_document(files.backgrounds, "background")
        return _require(repository.get_background(name), "Background not found")

    @app.get("/api/data/feats/phb")
    async def list_feats():
        """Get core rulebook feats."""
        require_document(files.feats, "feat")
        return repository.list_feats()

    @app.get("/api/data/feats/{name}")
    async def get_feat(name: str):
        """Get a feat by name."""
        require_document(files.feats, "feat")
        return _require(repository.get_feat(name), "Feat not found")

    # -- spells and items ----------------------------------------------------

    @app.get("/api/data/spells/class/{class_name}")
    async def spells_for_class(
        class_name: str,
        level: int = Query(1, ge=1),
        spell_level: Optional[int] = Query(None, alias="spellLevel"),
    ):
        """Get the spells a class can learn at a level."""
        require_document(files.spells, "spell")
        return repository.spells_for_class(class_name, level=level, spell_level=spell_level)

    @app.get("/api/data/items/type/{equipment_type}")
    async def items_by_type(equipment_type: str):
        """Get the items matching a starting-equipment choice."""
        if not repository.has_document(files.base_items) and not repository.has_document(files.items):
            raise HTTPException(status_code=500, detail="Could not load item data")
        try:
            return repository.items_by_equipment_type(equipment_type)
        except UnknownEquipmentType as e:
            logger.warning("Rejected equipment type %r", e.equipment_type)
            raise HTTPException(status_code=400, detail=str(e))

    # -- computation ---------------------------------------------------------

    @app.post("/api/equipment/expand")
    async def expand_equipment(request: EquipmentRequest):
        """Open pack entries of an equipment list."""
        return {"expandedEquipment": await expander.expand(request.equipment)}

    @app.post("/api/characters/stats")
    async def calculate(request: StatsRequest):
        """Calculate a character's derived statistics."""
        character = Character.from_dict(request.model_dump())
        # Each request computes a separate document, so tokens are not shared
        outcome = await StatsRecalculator(repository, expander).recalculate(character)
        if not outcome.ok:
            raise HTTPException(status_code=422, detail=outcome.notice)
        return {"calculatedStats": outcome.stats.to_dict()}

    # -- preload -------------------------------------------------------------

    @app.get("/api/data/preload")
    async def preload():
        """Get every common index in one response."""
        return repository.snapshot(PRELOAD_CATEGORIES)

    @app.get("/api/data/preload/essential")
    async def preload_essential():
        """Get the small, frequently used indexes."""
        return repository.snapshot(ESSENTIAL_CATEGORIES)

    return app
