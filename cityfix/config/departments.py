"""
Department keyword table.

Static routing configuration: department -> case-insensitive substrings.
Order matters: departments are evaluated top to bottom and the first
department with any matching keyword wins. Bump the version whenever the
table changes so exported routing decisions can be traced to a table.
"""

DEPARTMENT_TABLE_VERSION = "2024.1"

DEFAULT_DEPARTMENT = "General Maintenance"

DEPARTMENT_KEYWORDS = (
    ("Road & Transport Department", (
        "pothole", "road", "street", "highway", "pavement", "asphalt",
        "traffic", "signal", "zebra crossing", "pedestrian crossing",
        "road damage", "crack", "divider", "median", "footpath", "sidewalk",
        "speed breaker", "road sign", "milestone", "bridge", "flyover",
    )),
    ("Electricity Department", (
        "streetlight", "street light", "light", "electricity", "power",
        "transformer", "cable", "wire", "pole", "electric pole",
        "power cut", "voltage", "short circuit", "meter", "bulb", "lamp",
    )),
    ("Sanitation Department", (
        "garbage", "waste", "trash", "rubbish", "litter", "dustbin",
        "sweeping", "cleaning", "drain", "sewage", "toilet", "public toilet",
        "waste disposal", "dump", "landfill", "compost", "garbage bin",
        "sanitation", "hygiene", "debris", "dumping",
    )),
    ("Water Supply Department", (
        "water", "leakage", "leak", "pipe", "pipeline", "tap", "valve",
        "drainage", "water supply", "sewer", "manhole", "overflow",
        "underground water", "water connection", "burst pipe", "water pressure",
        "water contamination", "water shortage", "pipeline burst",
    )),
    (DEFAULT_DEPARTMENT, (
        "park", "garden", "bench", "playground", "tree", "pruning",
        "wall", "fence", "building", "maintenance", "repair", "broken",
        "damaged", "graffiti", "vandalism", "paint", "construction",
    )),
)
