"""Project-wide constants for pestscan.

Centralizes severity thresholds, overlay geometry and colours so the
classifier, renderer and exporters never carry their own literals.
"""

# Severity thresholds (inclusive lower bounds)
SEVERE_MIN_COUNT = 10
"""Detection count at or above which an analysis is severe"""

MODERATE_MIN_COUNT = 5
"""Detection count at or above which an analysis is moderate"""

AVERAGE_DETECTIONS = 15
"""Reference insect count per analysis used for 'higher/lower than usual' comparisons"""

LOWER_THAN_AVERAGE_RATIO = 0.7
"""Counts below this fraction of the average compare as 'lower'"""

# Labels
PLACEHOLDER_LABEL = "unknown"
"""Label substituted when the detection service returns none"""

# Overlay colours (RGBA)
ACCENT_COLOR = (245, 158, 11, 255)
"""Amber used for boxes, corner accents and label backgrounds"""

LABEL_TEXT_COLOR = (255, 255, 255, 255)
"""Label text colour, contrasting with ACCENT_COLOR"""

INDEX_TEXT_COLOR = (0, 0, 0, 153)
"""Translucent black for the '#n' detection index"""

# Overlay geometry per variant.
# line_width / font_size are (minimum, fraction of image width).
OVERLAY_GEOMETRY = {
    "report": {
        "line_width": (3, 0.004),
        "font_size": (12, 0.018),
        "padding_ratio": 0.3,
        "gap": 2,
        "baseline_ratio": 0.4,
        "corner_radius": 0,
        "show_label_name": False,
    },
    "detail": {
        "line_width": (4, 0.005),
        "font_size": (14, 0.02),
        "padding_ratio": 0.4,
        "gap": 4,
        "baseline_ratio": 0.5,
        "corner_radius": 4,
        "show_label_name": True,
    },
}
"""Size-adaptive geometry for the two overlay variants"""

CORNER_LINE_WIDTH = (4, 0.005)
"""Corner accent stroke (minimum, fraction of image width)"""

CORNER_LENGTH_RATIO = 0.2
"""Corner accent leg length as a fraction of min(box width, box height)"""

INDEX_FONT_SIZE = (12, 0.015)
"""'#n' index font (minimum, fraction of image width)"""

INDEX_INSET = 4
"""Offset of the index text from the box's bottom-left corner"""

# Aggregation
DEFAULT_TOP_N = 5
"""Default number of provinces in summary rankings"""

EXPORT_SUMMARY_TOP_N = 10
"""Number of provinces listed in the exported summary report"""

RECENT_RECORDS_LIMIT = 5
"""Number of records shown in 'recent detections' views"""

# Map
PHILIPPINES_CENTER = (12.8797, 121.7740)
"""Map centre used when no record carries coordinates"""

# Relative filter windows in whole days
FILTER_WINDOWS = {
    "today": 0,
    "week": 7,
    "month": 30,
    "quarter": 90,
    "year": 365,
}
"""Named look-back windows for record filtering"""

# Summary cache
SUMMARY_CACHE_SIZE = 64
"""Maximum number of memoized summaries"""

PHILIPPINE_PROVINCES = (
    "Abra", "Agusan del Norte", "Agusan del Sur", "Aklan", "Albay", "Antique", "Apayao", "Aurora",
    "Basilan", "Bataan", "Batanes", "Batangas", "Benguet", "Biliran", "Bohol", "Bukidnon",
    "Bulacan", "Cagayan", "Camarines Norte", "Camarines Sur", "Camiguin", "Capiz", "Catanduanes",
    "Cavite", "Cebu", "Cotabato", "Davao de Oro", "Davao del Norte", "Davao del Sur", "Davao Occidental",
    "Davao Oriental", "Dinagat Islands", "Eastern Samar", "Guimaras", "Ifugao", "Ilocos Norte",
    "Ilocos Sur", "Iloilo", "Isabela", "Kalinga", "La Union", "Laguna", "Lanao del Norte",
    "Lanao del Sur", "Leyte", "Maguindanao", "Marinduque", "Masbate", "Metro Manila", "Misamis Occidental",
    "Misamis Oriental", "Mountain Province", "Negros Occidental", "Negros Oriental", "Northern Samar",
    "Nueva Ecija", "Nueva Vizcaya", "Occidental Mindoro", "Oriental Mindoro", "Palawan", "Pampanga",
    "Pangasinan", "Quezon", "Quirino", "Rizal", "Romblon", "Samar", "Sarangani", "Siquijor",
    "Sorsogon", "South Cotabato", "Southern Leyte", "Sultan Kudarat", "Sulu", "Surigao del Norte",
    "Surigao del Sur", "Tarlac", "Tawi-Tawi", "Zambales", "Zamboanga del Norte", "Zamboanga del Sur",
    "Zamboanga Sibugay",
)
"""Province names offered by filter pickers"""
