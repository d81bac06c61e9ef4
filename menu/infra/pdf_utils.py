import io
from typing import Iterable
from reportlab.lib.pagesizes import A4, landscape
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib import colors
from reportlab.lib.styles import getSampleStyleSheet

from menu.domain.WeeklyMenu import DayMenu, WeeklyMenu


def _price(cents) -> str:
    return f"{cents / 100:.2f}" if cents is not None else "-"


def generate_pdf_for_menu(menu: WeeklyMenu, day_menus: Iterable[DayMenu]) -> bytes:
    """Kitchen sheet for a weekly menu: one row per dish (day, date, slot, dish, price)."""
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf, pagesize=landscape(A4),
        rightMargin=20, leftMargin=20, topMargin=20, bottomMargin=20
    )

    styles = getSampleStyleSheet()
    elements = [
        Paragraph(f"Weekly Menu – Week of {menu.week_start_date} (rotation {menu.week_number})", styles["Title"]),
        Paragraph(f"Order deadline: {menu.order_deadline or '-'} · Delivery: {menu.delivery_date or '-'}",
                  styles["Normal"]),
        Spacer(1, 16),
    ]

    data = [["Day", "Date", "Slot", "Dish", "Price", "Available"]]
    for day in day_menus:
        for item in day.dishes:
            data.append([
                day.day_name,
                day.date,
                str(item.meal_position if item.meal_position is not None else "-"),
                item.dish.name if item.dish else "-",
                _price(item.dish.price_cents if item.dish else None),
                "yes" if item.is_available else "no",
            ])

    table = Table(data, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#B45309")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
        ("ALIGN", (0, 0), (-1, -1), "CENTER"),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 12),
        ("BOTTOMPADDING", (0, 0), (-1, 0), 10),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
    ]))

    elements.append(table)
    doc.build(elements)
    return buf.getvalue()
