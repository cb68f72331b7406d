"""
Office catalog: room types, slot layouts and slot upgrade options.

Rooms are placed freely on the office grid; slot upgrades go into the fixed
named slots each office size defines. Both feed the bonus calculator.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from content import size_index


@dataclass(frozen=True)
class RoomType:
    id: str
    name: str
    base_cost: float
    width: int
    height: int
    effects: Dict[str, float] = field(default_factory=dict)
    office_sizes: Tuple[str, ...] = ()  # Any listed size or larger qualifies
    min_employees: int = 0
    max_per_office: Optional[int] = None
    upgradable: bool = True
    upgrade_multiplier: Optional[float] = None


ROOM_TYPES: List[RoomType] = [
    RoomType("dev_pit", "Dev Pit", 5000, 2, 2,
             {"productivityBonus": 0.15, "capacityBonus": 2}, upgrade_multiplier=1.3),
    RoomType("server_room", "Server Room", 8000, 2, 1,
             {"researchBonus": 0.20}, upgrade_multiplier=1.25),
    RoomType("break_room", "Break Room", 3000, 2, 2,
             {"moraleBonus": 2}, upgrade_multiplier=1.5),
    RoomType("meeting_room", "Meeting Room", 4000, 2, 1,
             {"teamworkBonus": 0.10}, upgrade_multiplier=1.3),
    RoomType("exec_office", "Executive Office", 15000, 2, 2,
             {"reputationBonus": 1}, office_sizes=("medium", "large", "campus"),
             min_employees=5, max_per_office=3, upgrade_multiplier=1.5),
    RoomType("lobby", "Lobby", 10000, 3, 2,
             {"eventBonus": 0.05, "reputationBonus": 0.5}, office_sizes=("small", "medium", "large", "campus"),
             max_per_office=1, upgrade_multiplier=1.4),
    RoomType("gym", "Fitness Center", 12000, 2, 2,
             {"moraleBonus": 3}, office_sizes=("medium", "large", "campus"),
             min_employees=8, max_per_office=2, upgrade_multiplier=1.3),
    RoomType("cafeteria", "Cafeteria", 8000, 3, 2,
             {"burnoutReduction": 0.50, "moraleBonus": 1}, office_sizes=("medium", "large", "campus"),
             min_employees=6, max_per_office=2, upgrade_multiplier=1.25),
    RoomType("storage", "Storage Room", 1000, 1, 1, {}, upgradable=False),
    RoomType("phone_booth", "Phone Booth", 2000, 1, 1,
             {"productivityBonus": 0.05}, upgradable=False),
    RoomType("quiet_zone", "Quiet Zone", 4000, 2, 1,
             {"researchBonus": 0.10, "moraleBonus": 1}, upgrade_multiplier=1.3),
    RoomType("game_room", "Game Room", 6000, 2, 2,
             {"moraleBonus": 4}, office_sizes=("medium", "large", "campus"),
             min_employees=5, max_per_office=1, upgrade_multiplier=1.4),
    RoomType("meditation_room", "Meditation Room", 5000, 1, 2,
             {"burnoutReduction": 0.30, "moraleBonus": 2}, upgrade_multiplier=1.3),
]

ROOM_TYPES_BY_ID: Dict[str, RoomType] = {rt.id: rt for rt in ROOM_TYPES}

# width, height, max rooms
OFFICE_GRID_SIZES: Dict[str, Tuple[int, int, int]] = {
    "hacker_den": (4, 3, 3),
    "small": (6, 4, 6),
    "medium": (8, 5, 10),
    "large": (10, 6, 15),
    "campus": (12, 8, 24),
}


def get_room_type(type_id: str) -> Optional[RoomType]:
    return ROOM_TYPES_BY_ID.get(type_id)


def meets_size_requirement(office_size: str, allowed: Iterable[str]) -> bool:
    """True when the office is at least as large as the smallest allowed size."""
    allowed = list(allowed)
    if not allowed:
        return True
    current = size_index(office_size)
    return any(current >= size_index(req) for req in allowed)


def room_cells(type_id: str, grid_x: int, grid_y: int) -> List[Tuple[int, int]]:
    room_type = ROOM_TYPES_BY_ID[type_id]
    return [
        (grid_x + dx, grid_y + dy)
        for dx in range(room_type.width)
        for dy in range(room_type.height)
    ]


def occupied_cells(rooms) -> Set[Tuple[int, int]]:
    cells: Set[Tuple[int, int]] = set()
    for room in rooms:
        if room.type_id not in ROOM_TYPES_BY_ID:
            continue
        cells.update(room_cells(room.type_id, room.grid_x, room.grid_y))
    return cells


def can_place_room(room_type: RoomType, grid_x: int, grid_y: int, grid_width: int,
                   grid_height: int, occupied: Set[Tuple[int, int]]) -> bool:
    """Bounds and overlap check for a room footprint."""
    if grid_x < 0 or grid_y < 0:
        return False
    if grid_x + room_type.width > grid_width or grid_y + room_type.height > grid_height:
        return False
    return not any(cell in occupied for cell in room_cells(room_type.id, grid_x, grid_y))


@dataclass(frozen=True)
class UpgradeOption:
    id: str
    name: str
    cost: float
    slot_type: str
    effects: Dict[str, float]
    max_level: int
    requires_office: Tuple[str, ...] = ()


UPGRADE_OPTIONS: List[UpgradeOption] = [
    # Workstation
    UpgradeOption("basic_desks", "Basic Desks", 2000, "workstation", {"productivity": 0.05, "capacity": 2}, 1),
    UpgradeOption("dev_workstations", "Dev Workstations", 5000, "workstation",
                  {"productivity": 0.15, "capacity": 3}, 3),
    UpgradeOption("standing_desks", "Standing Desks", 8000, "workstation",
                  {"productivity": 0.12, "morale": 1, "capacity": 2}, 3),
    UpgradeOption("pod_workstations", "Focus Pods", 12000, "workstation",
                  {"productivity": 0.20, "research": 0.10}, 2, ("medium", "large", "campus")),
    # Amenity
    UpgradeOption("coffee_corner", "Coffee Corner", 1500, "amenity", {"morale": 2}, 3),
    UpgradeOption("snack_bar", "Snack Bar", 3000, "amenity", {"morale": 3}, 2),
    UpgradeOption("game_corner", "Game Corner", 6000, "amenity",
                  {"morale": 4, "burnoutReduction": 0.15}, 2, ("small", "medium", "large", "campus")),
    UpgradeOption("full_kitchen", "Full Kitchen", 15000, "amenity",
                  {"morale": 5, "burnoutReduction": 0.25}, 2, ("medium", "large", "campus")),
    # Infrastructure
    UpgradeOption("server_closet", "Server Closet", 5000, "infrastructure", {"research": 0.10}, 3),
    UpgradeOption("server_room", "Server Room", 20000, "infrastructure",
                  {"research": 0.25, "productivity": 0.05}, 3, ("medium", "large", "campus")),
    UpgradeOption("meeting_booth", "Meeting Booth", 2000, "infrastructure", {"productivity": 0.05}, 2),
    UpgradeOption("conference_room", "Conference Room", 10000, "infrastructure",
                  {"productivity": 0.10, "reputation": 0.5}, 2, ("small", "medium", "large", "campus")),
    # Wellness
    UpgradeOption("nap_corner", "Nap Corner", 2000, "wellness", {"burnoutReduction": 0.20, "morale": 1}, 2),
    UpgradeOption("meditation_space", "Meditation Space", 5000, "wellness",
                  {"burnoutReduction": 0.30, "morale": 2}, 2),
    UpgradeOption("gym_corner", "Fitness Corner", 8000, "wellness",
                  {"morale": 3, "burnoutReduction": 0.15}, 2, ("medium", "large", "campus")),
    UpgradeOption("full_gym", "Full Gym", 25000, "wellness",
                  {"morale": 5, "burnoutReduction": 0.35}, 2, ("large", "campus")),
    # Executive
    UpgradeOption("reception_desk", "Reception Desk", 5000, "executive",
                  {"reputation": 1}, 2, ("small", "medium", "large", "campus")),
    UpgradeOption("exec_office", "Executive Office", 15000, "executive",
                  {"reputation": 2, "morale": 1}, 2, ("medium", "large", "campus")),
    UpgradeOption("lobby", "Impressive Lobby", 30000, "executive", {"reputation": 3}, 2, ("large", "campus")),
    # Utility
    UpgradeOption("storage_closet", "Storage Closet", 1000, "utility", {}, 1),
    UpgradeOption("it_closet", "IT Closet", 3000, "utility", {"productivity": 0.03}, 2),
]

UPGRADE_OPTIONS_BY_ID: Dict[str, UpgradeOption] = {u.id: u for u in UPGRADE_OPTIONS}


def get_upgrade(upgrade_id: str) -> Optional[UpgradeOption]:
    return UPGRADE_OPTIONS_BY_ID.get(upgrade_id)


@dataclass(frozen=True)
class OfficeLayout:
    id: str
    name: str
    base_capacity: int
    slots: Dict[str, str]  # slot id -> slot type


OFFICE_LAYOUTS: Dict[str, OfficeLayout] = {
    "hacker_den": OfficeLayout("hacker_den", "Hacker Den", 4, {
        "main_work": "workstation",
        "corner_1": "amenity",
        "closet": "utility",
    }),
    "small": OfficeLayout("small", "Small Office", 8, {
        "main_work": "workstation",
        "secondary_work": "workstation",
        "break_area": "amenity",
        "meeting": "infrastructure",
        "entrance": "executive",
    }),
    "medium": OfficeLayout("medium", "Medium Office", 15, {
        "dev_area": "workstation",
        "research_area": "workstation",
        "open_space": "workstation",
        "kitchen": "amenity",
        "lounge": "amenity",
        "server": "infrastructure",
        "conf_room": "infrastructure",
        "wellness": "wellness",
        "reception": "executive",
    }),
    "large": OfficeLayout("large", "Large Office", 30, {
        "eng_floor": "workstation",
        "product_area": "workstation",
        "research_lab": "workstation",
        "collab_space": "workstation",
        "cafeteria": "amenity",
        "game_room": "amenity",
        "data_center": "infrastructure",
        "board_room": "infrastructure",
        "gym": "wellness",
        "quiet_room": "wellness",
        "exec_suite": "executive",
        "lobby": "executive",
    }),
    "campus": OfficeLayout("campus", "Tech Campus", 50, {
        "building_a": "workstation",
        "building_b": "workstation",
        "building_c": "workstation",
        "innovation_lab": "workstation",
        "food_hall": "amenity",
        "recreation": "amenity",
        "main_data": "infrastructure",
        "auditorium": "infrastructure",
        "training": "infrastructure",
        "wellness_center": "wellness",
        "meditation": "wellness",
        "hq": "executive",
    }),
}

