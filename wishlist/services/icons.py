"""Category icon identifiers.

Icons are purely cosmetic. Stored maps may contain names written by older
clients, so every lookup goes through :func:`resolve_icon`, which never
fails and falls back to :attr:`CategoryIcon.TAG`.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum


class CategoryIcon(StrEnum):
    TAG = "Tag"
    HEART = "Heart"
    STAR = "Star"
    GIFT = "Gift"
    SHOPPING_BAG = "ShoppingBag"
    SHIRT = "Shirt"
    MUSIC = "Music"
    FILM = "Film"
    BOOK = "Book"
    GAMEPAD2 = "Gamepad2"
    COFFEE = "Coffee"
    UTENSILS = "Utensils"
    HOME = "Home"
    CAR = "Car"
    PLANE = "Plane"
    CAMERA = "Camera"
    PALETTE = "Palette"
    DUMBBELL = "Dumbbell"
    LAPTOP = "Laptop"
    SMARTPHONE = "Smartphone"
    WATCH = "Watch"
    HEADPHONES = "Headphones"
    FLOWER = "Flower"
    SPARKLES = "Sparkles"
    GEM = "Gem"
    CROWN = "Crown"
    ZAP = "Zap"
    SUN = "Sun"
    MOON = "Moon"
    CLOUD = "Cloud"
    WINE = "Wine"
    BEER = "Beer"
    COOKIE = "Cookie"
    CAKE = "Cake"
    ICE_CREAM = "IceCream"
    PIZZA = "Pizza"
    APPLE = "Apple"
    CHERRY = "Cherry"
    FISH = "Fish"
    CHEF_HAT = "ChefHat"
    DIAMOND = "Diamond"
    SCISSORS = "Scissors"
    LIPSTICK = "Lipstick"
    SHOE = "Shoe"
    GLASSES = "Glasses"
    HANDBAG = "Handbag"
    WAND2 = "Wand2"
    TABLET = "Tablet"
    MONITOR = "Monitor"
    KEYBOARD = "Keyboard"
    MOUSE = "Mouse"
    PRINTER = "Printer"
    ROUTER = "Router"
    HARD_DRIVE = "HardDrive"
    USB = "Usb"
    BATTERY = "Battery"
    SERVER = "Server"
    DATABASE = "Database"
    WIFI = "Wifi"
    BLUETOOTH = "Bluetooth"
    PAINTBRUSH = "Paintbrush"
    BRUSH = "Brush"
    ROCKET = "Rocket"
    PUZZLE = "Puzzle"
    DICE6 = "Dice6"
    CARDS = "Cards"
    TROPHY = "Trophy"
    AWARD = "Award"
    MEDAL = "Medal"
    PIANO = "Piano"
    GUITAR = "Guitar"
    BIKE = "Bike"
    SKIING = "Skiing"
    SWIMMING = "Swimming"
    TENNIS = "Tennis"
    FOOTBALL = "Football"
    BASKETBALL = "Basketball"
    VOLLEYBALL = "Volleyball"
    RUNNING = "Running"
    YOGA = "Yoga"
    SAILBOAT = "Sailboat"
    TREE = "Tree"
    MOUNTAIN = "Mountain"
    WAVES = "Waves"
    BIRD = "Bird"
    DOG = "Dog"
    CAT = "Cat"
    RABBIT = "Rabbit"
    LEAF = "Leaf"
    BUG = "Bug"
    TENT = "Tent"
    TRAIN = "Train"
    SHIP = "Ship"
    MAP = "Map"
    MAP_PIN = "MapPin"
    COMPASS = "Compass"
    SUITCASE = "Suitcase"
    TICKET = "Ticket"
    HOTEL = "Hotel"
    NAVIGATION2 = "Navigation2"
    TV = "Tv"
    MIC = "Mic"
    VIDEO = "Video"
    DISC = "Disc"
    CLAPPERBOARD = "Clapperboard"
    BED = "Bed"
    SOFA = "Sofa"
    LAMP = "Lamp"
    ARMCHAIR = "Armchair"
    COUCH = "Couch"
    DOOR = "Door"
    WINDOW = "Window"
    PLANT = "Plant"
    CACTUS = "Cactus"
    CANDLE = "Candle"
    BATH = "Bath"
    HEART_PULSE = "HeartPulse"
    STETHOSCOPE = "Stethoscope"
    PILL = "Pill"
    CROSS = "Cross"
    ACTIVITY = "Activity"
    BRAIN = "Brain"
    SMILE = "Smile"
    HEART_HANDSHAKE = "HeartHandshake"
    GRADUATION_CAP = "GraduationCap"
    BRIEFCASE = "Briefcase"
    FILE_TEXT = "FileText"
    FOLDER = "Folder"
    PEN = "Pen"
    PENCIL = "Pencil"
    CALCULATOR = "Calculator"
    MICROSCOPE = "Microscope"
    BEAKER = "Beaker"
    BOOK_OPEN = "BookOpen"
    BELL = "Bell"
    MAIL = "Mail"
    PHONE = "Phone"
    MESSAGE_CIRCLE = "MessageCircle"
    USERS = "Users"
    USER = "User"
    SETTINGS = "Settings"
    LOCK = "Lock"
    KEY = "Key"
    SHIELD = "Shield"
    FLAG = "Flag"
    GLOBE = "Globe"
    TARGET = "Target"
    LIGHTBULB = "Lightbulb"
    FIRE = "Fire"
    DROPLET = "Droplet"
    SNOWFLAKE = "Snowflake"
    RAINBOW = "Rainbow"
    THUMBS_UP = "ThumbsUp"


DEFAULT_ICON = CategoryIcon.TAG

_BY_NAME: dict[str, CategoryIcon] = {
    icon.value.lower(): icon for icon in CategoryIcon
}


def resolve_icon(name: str | None) -> CategoryIcon:
    """Map a stored icon name onto a known icon, ``TAG`` when unknown."""

    if not name:
        return DEFAULT_ICON
    return _BY_NAME.get(name.strip().lower(), DEFAULT_ICON)


def normalize_icon_map(raw: Mapping[str, object] | None) -> dict[str, CategoryIcon]:
    if not raw:
        return {}
    return {
        str(category): resolve_icon(value if isinstance(value, str) else None)
        for category, value in raw.items()
    }


__all__ = ["DEFAULT_ICON", "CategoryIcon", "normalize_icon_map", "resolve_icon"]
