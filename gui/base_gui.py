# gui/base_gui.py
# Shared pygame configuration and drawing helpers for the PlayZone games.

import logging

import pygame

logger = logging.getLogger(__name__)

# --- Base Configuration ---
BASE_CONFIG = {
    "TIMING": {"FPS": 60},
    "SCREEN": {"WIDTH": 640, "HEIGHT": 700},
    "SIZES": {"BLOCK_SIZE": 30, "PREVIEW_BLOCK_SIZE": 20},
    "STYLE": {
        "CORNER_RADIUS": 5,
        "BORDER_WIDTH": 1,
        "BLOCK_BORDER": (255, 255, 255),
        # Block face: color scaled by SHADE, blended toward HIGHLIGHT
        "SHADE": 0.8,
        "HIGHLIGHT": (220, 220, 220),
        "HIGHLIGHT_STRENGTH": 0.8,
    },
    "COLORS": {
        "BACKGROUND": (20, 20, 30),
        "BOARD_BACKGROUND": (10, 10, 20),
        "GRID_LINES": (40, 40, 55),
        "TEXT": (255, 255, 255),
        "MUTED_TEXT": (160, 160, 180),
        "BUTTON": (70, 70, 90),
        "BUTTON_HOVER": (100, 100, 120),
        "ERROR": (200, 50, 50),
        # Tetromino color tags -> RGB
        "PIECE_COLORS": {
            "cyan": (1, 237, 250),
            "yellow": (254, 251, 52),
            "purple": (128, 0, 128),
            "green": (57, 137, 47),
            "red": (253, 63, 89),
            "blue": (0, 119, 211),
            "orange": (255, 165, 0),
        },
    },
    "FONTS": {
        "DEFAULT_FONT": 'assets/fonts/PressStart2P-Regular.ttf',
        "SIZES": {
            "TINY": 10, "SMALL": 15, "MEDIUM": 20, "LARGE": 25, "TITLE": 36,
        },
    },
}

# --- UI Helper Classes ---

class Button:
    def __init__(self, x, y, w, h, font, text=''):
        self.rect = pygame.Rect(x, y, w, h)
        self.color = BASE_CONFIG["COLORS"]["BUTTON"]
        self.text = text
        self.font = font

    def handle_event(self, event):
        if event.type == pygame.MOUSEBUTTONDOWN:
            return self.rect.collidepoint(event.pos)
        return False

    def draw(self, screen):
        color = self.color
        if self.rect.collidepoint(pygame.mouse.get_pos()):
            color = BASE_CONFIG["COLORS"]["BUTTON_HOVER"]
        pygame.draw.rect(screen, color, self.rect, 0, border_radius=BASE_CONFIG["STYLE"]["CORNER_RADIUS"])
        text_surf = self.font.render(self.text, True, BASE_CONFIG["COLORS"]["TEXT"])
        text_rect = text_surf.get_rect(center=self.rect.center)
        screen.blit(text_surf, text_rect)

# --- Drawing Functions ---

def load_fonts():
    """Load the configured font at every size, falling back to pygame's default font."""
    font_path = BASE_CONFIG["FONTS"]["DEFAULT_FONT"]
    sizes = BASE_CONFIG["FONTS"]["SIZES"]
    fonts = {}
    try:
        for name, size in sizes.items():
            fonts[name] = pygame.font.Font(font_path, size)
    except (pygame.error, FileNotFoundError, OSError):
        logger.info(f"Font {font_path} not available, using default font")
        for name, size in sizes.items():
            fonts[name] = pygame.font.Font(None, size + 8)
    return fonts


def draw_text(surface, text, x, y, font, color):
    """Draws text using a pre-rendered font object."""
    try:
        text_surface = font.render(text, True, color)
        surface.blit(text_surface, (x, y))
    except pygame.error as e:
        logger.warning(f"Error rendering text: {e}")


_block_cache = {}


def _blend(start, end, factor):
    return tuple(int(s + (e - s) * factor) for s, e in zip(start, end))


def get_gradient_block(size, color):
    """
    A rounded block shaded from a darkened color (top-left) toward the
    highlight color (bottom-right). Cached per size and color.
    """
    style = BASE_CONFIG["STYLE"]
    cache_key = (tuple(size), tuple(color))
    if cache_key in _block_cache:
        return _block_cache[cache_key]

    block_surface = pygame.Surface(size, pygame.SRCALPHA)
    pygame.draw.rect(block_surface, style["BLOCK_BORDER"], block_surface.get_rect(), 0,
                     border_radius=style["CORNER_RADIUS"])

    inner = block_surface.get_rect().inflate(-style["BORDER_WIDTH"] * 2, -style["BORDER_WIDTH"] * 2)
    base = _blend((0, 0, 0), color, style["SHADE"])
    # One color per anti-diagonal (x + y constant)
    span = max(inner.width + inner.height - 2, 1)
    shades = [_blend(base, style["HIGHLIGHT"], style["HIGHLIGHT_STRENGTH"] * d / span)
              for d in range(span + 1)]
    for y in range(inner.height):
        for x in range(inner.width):
            block_surface.set_at((inner.left + x, inner.top + y), shades[x + y])

    _block_cache[cache_key] = block_surface
    return block_surface


def piece_color(color_tag):
    return BASE_CONFIG["COLORS"]["PIECE_COLORS"].get(color_tag, (255, 255, 255))


def draw_board(surface, cells, x_start, y_start, block_size):
    """Draw a grid of cells (objects with .filled and .color)."""
    grid_color = BASE_CONFIG["COLORS"]["GRID_LINES"]
    num_rows = len(cells); num_cols = len(cells[0])
    background = pygame.Rect(x_start, y_start, num_cols * block_size, num_rows * block_size)
    pygame.draw.rect(surface, BASE_CONFIG["COLORS"]["BOARD_BACKGROUND"], background)

    for r in range(num_rows):
        for c in range(num_cols):
            cell = cells[r][c]
            rect = pygame.Rect(x_start + c * block_size, y_start + r * block_size, block_size, block_size)
            if cell.filled:
                surface.blit(get_gradient_block((block_size, block_size), piece_color(cell.color)), rect.topleft)
            else:
                # For empty cells, draw the faint grid line
                pygame.draw.rect(surface, grid_color, rect, 1)


def draw_shape(surface, shape, color_tag, x_start, y_start, block_size):
    """Draw a bare shape matrix (the next-piece preview)."""
    block_surface = get_gradient_block((block_size, block_size), piece_color(color_tag))
    for r, row in enumerate(shape):
        for c, value in enumerate(row):
            if value:
                surface.blit(block_surface, (x_start + c * block_size, y_start + r * block_size))
