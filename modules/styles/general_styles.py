"""
Единые стили интерфейса TradeDesk
"""
from config.settings import config

UI_CONFIG = config.ui

BASE_FONT_SIZE = UI_CONFIG.font_size if UI_CONFIG.font_size > 0 else 14
FONT_FAMILY = UI_CONFIG.font_family or 'Arial'

FONT_SIZES = {
    'h1': f"{int(BASE_FONT_SIZE * 1.43)}px",
    'h2': f"{int(BASE_FONT_SIZE * 1.29)}px",
    'normal': f"{BASE_FONT_SIZE}px",
    'small': f"{int(BASE_FONT_SIZE * 0.86)}px",
    'counter': f"{int(BASE_FONT_SIZE * 2)}px",
}

SIZES = {
    'padding_normal': 6,
    'padding_large': 10,
    'border_radius_normal': 6,
    'border_radius_large': 8,
    'button_height': 28,
    'sidebar_width': 200,
}

COLORS = {
    'primary': '#2E7D32',
    'primary_dark': '#1B5E20',
    'secondary': '#F5F5F5',
    'white': '#FFFFFF',
    'text_dark': '#37474F',
    'text_light': '#78909C',
    'border': '#D5D5D5',
    'success': '#66BB6A',
    'warning': '#FFA726',
    'error': '#E53935',
}

BUTTON_STYLES = {
    'primary': f"""
        QPushButton {{
            background: {COLORS['primary']};
            color: white;
            border: none;
            border-radius: {SIZES['border_radius_normal']}px;
            padding: 4px 10px;
            font-weight: bold;
            font-family: "{FONT_FAMILY}";
            font-size: {FONT_SIZES['normal']};
            min-height: {SIZES['button_height']}px;
        }}
        QPushButton:hover {{
            background: {COLORS['primary_dark']};
        }}
        QPushButton:disabled {{
            background: #cccccc;
            color: #666666;
        }}
    """,
    'danger': f"""
        QPushButton {{
            background: {COLORS['white']};
            color: {COLORS['error']};
            border: 1px solid {COLORS['error']};
            border-radius: {SIZES['border_radius_normal']}px;
            padding: 3px 8px;
            font-family: "{FONT_FAMILY}";
            font-size: {FONT_SIZES['normal']};
            min-height: {SIZES['button_height']}px;
        }}
        QPushButton:hover {{
            background: {COLORS['error']};
            color: white;
        }}
    """,
    'sidebar': f"""
        QPushButton {{
            color: {COLORS['primary']};
            background: none;
            font-family: "{FONT_FAMILY}";
            font-size: {FONT_SIZES['h2']};
            border: none;
            padding: 14px 12px;
            text-align: left;
            border-radius: {SIZES['border_radius_large']}px;
        }}
        QPushButton:checked, QPushButton:hover {{
            background: #E8F5E9;
            font-weight: bold;
        }}
    """,
}

LABEL_STYLES = {
    'h1': f"font-family: \"{FONT_FAMILY}\"; font-size: {FONT_SIZES['h1']}; font-weight: bold; color: {COLORS['primary']};",
    'h2': f"font-family: \"{FONT_FAMILY}\"; font-size: {FONT_SIZES['h2']}; font-weight: bold; color: {COLORS['text_dark']};",
    'normal': f"font-family: \"{FONT_FAMILY}\"; font-size: {FONT_SIZES['normal']}; color: {COLORS['text_dark']};",
    'small': f"font-family: \"{FONT_FAMILY}\"; font-size: {FONT_SIZES['small']}; color: {COLORS['text_light']};",
    'counter': f"font-family: \"{FONT_FAMILY}\"; font-size: {FONT_SIZES['counter']}; font-weight: bold; color: {COLORS['primary']};",
}

FRAME_STYLES = {
    'card': f"""
        QFrame {{
            background: {COLORS['white']};
            border-radius: {SIZES['border_radius_large']}px;
            border: 1px solid {COLORS['border']};
            padding: {SIZES['padding_large']}px;
        }}
    """,
    'sidebar': f"""
        QFrame {{
            background: {COLORS['secondary']};
            border-right: 1px solid {COLORS['border']};
            min-width: {SIZES['sidebar_width']}px;
        }}
    """,
}

TABLE_STYLE = f"""
    QTableWidget {{
        font-family: "{FONT_FAMILY}";
        font-size: {FONT_SIZES['normal']};
        background: {COLORS['white']};
        gridline-color: {COLORS['border']};
    }}
    QHeaderView::section {{
        background: {COLORS['primary']};
        color: white;
        font-weight: bold;
        padding: 8px;
        border: none;
    }}
"""


def apply_button_style(widget, style_type='primary'):
    widget.setStyleSheet(BUTTON_STYLES.get(style_type, BUTTON_STYLES['primary']))


def apply_label_style(widget, style_type='normal'):
    widget.setStyleSheet(LABEL_STYLES.get(style_type, LABEL_STYLES['normal']))


def apply_frame_style(widget, style_type='card'):
    widget.setStyleSheet(FRAME_STYLES.get(style_type, FRAME_STYLES['card']))


def apply_table_style(widget):
    widget.setStyleSheet(TABLE_STYLE)
