import enum

class GadgetCategoryEnum(enum.Enum):
    SMARTPHONES = "Smartphones"
    LAPTOPS = "Laptops"
    TABLETS = "Tablets"
    SMARTWATCHES = "Smartwatches"
    CAMERAS = "Cameras"
    GAMING = "Gaming"
    AUDIO = "Audio"
    HEADPHONES = "Headphones"
    SPEAKERS = "Speakers"
    WEARABLES = "Wearables"
    VR = "VR"
    DRONES = "Drones"
    PROJECTORS = "Projectors"
