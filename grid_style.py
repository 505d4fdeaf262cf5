# Nonogram Grid Style Definitions

# Cell States
COLOR_EMPTY = (235, 235, 235)
COLOR_SHADED = (20, 20, 20)
COLOR_CROSS = (200, 60, 60)

# Lines and Outlines
COLOR_GRID_LINES = (150, 150, 150)
COLOR_BLOCK_LINES = (70, 70, 70)     # 5x5 block separators
COLOR_ACTIVE_HIGHLIGHT = (20, 120, 220)  # Blue outline under the pointer while dragging

# Text
COLOR_TEXT_CLUE = (230, 230, 230)
COLOR_TEXT_CLUE_DONE = (110, 110, 110)  # Line already matches its clue

# Application
COLOR_BG = (30, 30, 30)

# Sizes (world units, scaled by camera zoom)
BLOCK_PADDING = 2
CROSS_INSET = 0.22
CLUE_SPACING = 0.55  # fraction of a cell between two clue numbers
