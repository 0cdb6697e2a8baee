import io
import logging
from datetime import datetime

import pandas as pd
import xlsxwriter

from pricing import PromotionInputs, compute_promotion, daily_projection
from utils import format_currency, format_percent, format_units

logger = logging.getLogger(__name__)

CURRENCY_NUM_FORMAT = '£#,##0.00'


def scenario_payload(selection, inputs: PromotionInputs):
    """What gets stored for a scenario: the inputs only, results are recomputed"""
    return {
        'brand': selection.brand,
        'product_id': selection.product_id,
        'product_name': selection.product_name,
        'inputs': inputs.to_dict(),
    }


def generate_excel_report(brand, product_name, inputs: PromotionInputs):
    """
    Build the promotion workbook.

    Returns:
        io.BytesIO: xlsx file positioned at the start
    """
    # Create an in-memory output file
    output = io.BytesIO()

    result = compute_promotion(inputs)
    projection = daily_projection(inputs)

    workbook = xlsxwriter.Workbook(output, {'in_memory': True})

    # Add formatting
    title_format = workbook.add_format({'bold': True, 'font_size': 14, 'align': 'center', 'bg_color': '#D9EAD3'})
    header_format = workbook.add_format({'bold': True, 'font_size': 12, 'align': 'center', 'bg_color': '#E6F2FF'})
    currency_format = workbook.add_format({'num_format': CURRENCY_NUM_FORMAT})
    percent_format = workbook.add_format({'num_format': '0.0%'})
    bold_format = workbook.add_format({'bold': True})

    # Summary Sheet
    summary_sheet = workbook.add_worksheet('Summary')
    summary_sheet.set_column('A:A', 34)
    summary_sheet.set_column('B:D', 16)

    summary_sheet.merge_range(0, 0, 0, 3, 'Salon Retail Calculator', title_format)
    summary_sheet.write('A2', f'Generated on: {datetime.now().strftime("%d %B %Y")}')

    # Product
    summary_sheet.write('A4', 'PRODUCT', header_format)
    summary_sheet.write('A5', 'Brand:')
    summary_sheet.write('B5', brand or '')
    summary_sheet.write('A6', 'Product:')
    summary_sheet.write('B6', product_name or '')
    summary_sheet.write('A7', 'Salon Cost:')
    summary_sheet.write_number('B7', inputs.cost, currency_format)
    summary_sheet.write('A8', 'Salon RRP:')
    summary_sheet.write_number('B8', inputs.price, currency_format)

    # Salon information
    summary_sheet.write('A10', 'SALON INFORMATION', header_format)
    summary_sheet.write('A11', 'Promotion days:')
    summary_sheet.write_number('B11', inputs.days)
    summary_sheet.write('A12', 'Stylists:')
    summary_sheet.write_number('B12', inputs.stylists)
    summary_sheet.write('A13', 'Units per stylist per day:')
    summary_sheet.write_number('B13', inputs.units_per_stylist_per_day)

    # Outcome
    summary_sheet.write('A15', 'OUTCOME', header_format)
    rows = [
        ('Units per day (salon):', result.salon_units_per_day, None),
        ('Units (promotion total):', result.total_units, None),
        ('Total Cost:', result.total_cost, currency_format),
        ('Total Revenue:', result.total_revenue, currency_format),
        ('Total Profit:', result.total_profit, currency_format),
        ('Profit per unit:', result.unit_profit, currency_format),
        ('Revenue per day:', result.day_revenue, currency_format),
        ('Profit per day:', result.day_profit, currency_format),
    ]
    row = 16
    for label, value, fmt in rows:
        summary_sheet.write(f'A{row}', label)
        summary_sheet.write_number(f'B{row}', value, fmt)
        row += 1

    summary_sheet.write(f'A{row}', 'Margin:', bold_format)
    summary_sheet.write_number(f'B{row}', result.margin_percent / 100, percent_format)

    # Daily projection sheet
    projection_sheet = workbook.add_worksheet('Daily Projection')
    projection_sheet.set_column('A:E', 15)
    for col, name in enumerate(['Day', 'Units', 'Cost', 'Revenue', 'Profit']):
        projection_sheet.write(0, col, name, header_format)
    for i, point in enumerate(projection.itertuples(index=False), start=1):
        projection_sheet.write_number(i, 0, point.Day)
        projection_sheet.write_number(i, 1, point.Units)
        projection_sheet.write_number(i, 2, point.Cost, currency_format)
        projection_sheet.write_number(i, 3, point.Revenue, currency_format)
        projection_sheet.write_number(i, 4, point.Profit, currency_format)

    workbook.close()
    output.seek(0)
    logger.info("Excel report generated for %s / %s", brand, product_name)
    return output


def build_comparison_frame(scenarios):
    """
    One row per saved scenario, with results recomputed from the stored inputs.

    Args:
        scenarios (dict): name -> scenario as returned by database.load_scenarios

    Returns:
        pd.DataFrame: display-ready values
    """
    detailed_data = []
    for name, scenario in scenarios.items():
        inputs = PromotionInputs.from_dict(scenario.get('inputs', {}))
        result = compute_promotion(inputs)
        detailed_data.append({
            'Scenario': name,
            'Description': scenario.get('description', ''),
            'Product': scenario.get('product_name', ''),
            'Salon Cost': format_currency(inputs.cost),
            'Salon RRP': format_currency(inputs.price),
            'Days': format_units(inputs.days),
            'Stylists': format_units(inputs.stylists),
            'Units/Stylist/Day': format_units(inputs.units_per_stylist_per_day),
            'Total Units': format_units(result.total_units),
            'Total Cost': format_currency(result.total_cost),
            'Total Revenue': format_currency(result.total_revenue),
            'Total Profit': format_currency(result.total_profit),
            'Margin': format_percent(result.margin_percent),
            'Date Created': scenario.get('timestamp', ''),
        })
    return pd.DataFrame(detailed_data)


def comparison_to_excel(detailed_df):
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine='xlsxwriter') as writer:
        detailed_df.to_excel(writer, sheet_name="Scenario Comparison", index=False)
        worksheet = writer.sheets["Scenario Comparison"]

        # Set column widths
        worksheet.set_column('A:C', 22)
        worksheet.set_column('D:M', 14)
        worksheet.set_column('N:N', 18)

    buffer.seek(0)
    return buffer
