import logging
from datetime import datetime

import streamlit as st
from sqlalchemy.exc import SQLAlchemyError

import config
from catalog import CatalogError, load_catalog, reload_catalog
from charts import outcome_figure, projection_figure
from database import save_form_state, load_form_state, save_scenario, load_scenarios, delete_scenario
from logger import setup_logging
from pricing import PromotionInputs, compute_promotion, parse_amount, to_number
from report import build_comparison_frame, comparison_to_excel, generate_excel_report, scenario_payload
from resolver import Resolver
from utils import format_currency, format_input, format_percent, format_units

setup_logging()
logger = logging.getLogger("salon_retail.app")

# Page configuration
st.set_page_config(
    page_title="Salon Retail Calculator",
    page_icon="✂️",
    layout="wide"
)

try:
    catalog = load_catalog()
except (CatalogError, FileNotFoundError) as e:
    logger.error("Catalog could not be loaded: %s", e)
    st.error(f"The product catalog could not be loaded: {e}")
    st.stop()

resolver = Resolver(catalog, catalog_locked=config.CATALOG_LOCKED)

PROMOTION_FIELDS = {
    'days': 'days_input',
    'stylists': 'stylists_input',
    'units_per_stylist_per_day': 'per_stylist_input',
}


# Persistence is best effort: a failing database never blocks the calculator
def load_saved(data_type):
    try:
        return load_form_state(config.PROFILE, data_type)
    except SQLAlchemyError as e:
        logger.warning("Could not load saved %s: %s", data_type, e)
        return None


def persist(data_type, data):
    try:
        save_form_state(config.PROFILE, data_type, data)
    except SQLAlchemyError as e:
        logger.warning("Could not save %s: %s", data_type, e)


def sync_price_inputs():
    """Push the resolved cost/price back into the text boxes"""
    selection = st.session_state.selection
    st.session_state.cost_input = format_input(selection.cost)
    st.session_state.price_input = format_input(selection.price)


def sync_selection_inputs():
    selection = st.session_state.selection
    st.session_state.brand_select = selection.brand
    st.session_state.product_select = selection.product_id
    st.session_state.product_name_input = selection.product_name
    sync_price_inputs()


# Initialize session state variables if they don't exist
if 'selection' not in st.session_state:
    saved_selection = load_saved('selection')
    if saved_selection:
        st.session_state.selection = resolver.restore_selection(saved_selection)
    else:
        st.session_state.selection = resolver.initial_state()
    sync_selection_inputs()

if 'promotion' not in st.session_state:
    saved_promotion = load_saved('promotion') or {}
    st.session_state.promotion = {
        name: to_number(saved_promotion.get(name, default))
        for name, default in config.DEFAULT_PROMOTION.items()
    }
    for name, key in PROMOTION_FIELDS.items():
        st.session_state[key] = format_input(st.session_state.promotion[name])


# Widget callbacks
def on_brand_select():
    selection = st.session_state.selection
    resolver.on_brand_changed(selection, st.session_state.brand_select)
    sync_selection_inputs()
    persist('selection', selection.to_dict())


def on_product_select():
    selection = st.session_state.selection
    resolver.on_product_changed(selection, st.session_state.product_select)
    sync_selection_inputs()
    persist('selection', selection.to_dict())


def on_product_name_input():
    selection = st.session_state.selection
    resolver.on_product_name_edited(selection, st.session_state.product_name_input)
    sync_price_inputs()
    persist('selection', selection.to_dict())


def on_price_input(field_name, key):
    selection = st.session_state.selection
    resolver.on_field_edited(selection, field_name, st.session_state[key])
    persist('selection', selection.to_dict())


def on_promotion_input(name, key):
    st.session_state.promotion[name] = parse_amount(st.session_state[key])
    persist('promotion', st.session_state.promotion)


def apply_scenario(scenario):
    """Load a saved scenario into the form without touching recorded overrides"""
    selection = st.session_state.selection
    restored = resolver.restore_selection({
        'brand': scenario.get('brand'),
        'product_id': scenario.get('product_id'),
        'product_name': scenario.get('product_name'),
        'overrides': selection.overrides.to_dict(),
    })
    inputs = PromotionInputs.from_dict(scenario.get('inputs', {}))
    restored.cost = inputs.cost
    restored.price = inputs.price
    st.session_state.selection = restored
    st.session_state.promotion = {
        'days': inputs.days,
        'stylists': inputs.stylists,
        'units_per_stylist_per_day': inputs.units_per_stylist_per_day,
    }
    for name, key in PROMOTION_FIELDS.items():
        st.session_state[key] = format_input(st.session_state.promotion[name])
    sync_selection_inputs()
    persist('selection', restored.to_dict())
    persist('promotion', st.session_state.promotion)


def current_inputs():
    selection = st.session_state.selection
    return PromotionInputs(cost=selection.cost, price=selection.price, **st.session_state.promotion)


# Calculate values to use throughout the app
selection = st.session_state.selection
inputs = current_inputs()
result = compute_promotion(inputs)

# Use the Streamlit sidebar for the promotion summary which is always visible
with st.sidebar:
    st.markdown("### Promotion Summary")
    st.metric("Total Revenue", format_currency(result.total_revenue))
    st.metric("Total Cost", format_currency(result.total_cost))
    st.metric("Total Profit", format_currency(result.total_profit))
    st.metric("Margin", format_percent(result.margin_percent))

    st.markdown("---")
    st.caption(f"Catalog v{catalog.version}")
    if st.button("Reload catalog", help="Re-read the product catalog from disk"):
        try:
            fresh_catalog = reload_catalog()
        except (CatalogError, FileNotFoundError) as e:
            st.error(f"Catalog reload failed: {e}")
        else:
            # Products may have gone away, re-resolve against the new catalog
            st.session_state.selection = Resolver(
                fresh_catalog, catalog_locked=config.CATALOG_LOCKED
            ).restore_selection(selection.to_dict())
            sync_selection_inputs()
            st.rerun()

# Header
header_col1, header_col2 = st.columns([5, 1])
with header_col1:
    st.title("Salon Retail Calculator")
with header_col2:
    st.write("")
    excel_file = generate_excel_report(selection.brand, selection.product_name, inputs)
    st.download_button(
        label="📊 Export to Excel",
        data=excel_file,
        file_name=f"salon_retail_calculator_{datetime.now().strftime('%Y-%m-%d')}.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )

calculator_tab, scenarios_tab = st.tabs(["Calculator", "Scenarios"])

with calculator_tab:
    # Product by brand
    st.header("Product (by brand)")

    brands = catalog.list_brands()
    st.selectbox("Brand", brands, key="brand_select", on_change=on_brand_select)

    if resolver.catalog_locked:
        products = catalog.list_products(selection.brand)
        names = {p.id: p.name for p in products}
        st.selectbox(
            "Product",
            [p.id for p in products],
            key="product_select",
            format_func=lambda product_id: names.get(product_id, product_id),
            on_change=on_product_select
        )
    else:
        st.text_input("Product", key="product_name_input", on_change=on_product_name_input)

    price_col1, price_col2 = st.columns(2)
    with price_col1:
        st.text_input("Salon Cost (£)", key="cost_input",
                      on_change=on_price_input, args=("cost", "cost_input"))
    with price_col2:
        st.text_input("Salon RRP (£)", key="price_input",
                      on_change=on_price_input, args=("price", "price_input"))

    selected_product = resolver.current_product(selection)
    if selected_product:
        if resolver.catalog_locked:
            st.caption(f"Product name is chosen from the list (not editable). Selected: *{selected_product.name}*")
        else:
            st.caption(f"Selected: *{selected_product.name}*")
    else:
        st.caption("Choose a product")

    # Salon information
    st.header("Salon Information")
    info_col1, info_col2, info_col3 = st.columns(3)
    with info_col1:
        st.text_input("How many days are you running this promotion?", key="days_input",
                      on_change=on_promotion_input, args=("days", "days_input"))
    with info_col2:
        st.text_input("How many stylists do you have?", key="stylists_input",
                      on_change=on_promotion_input, args=("stylists", "stylists_input"))
    with info_col3:
        st.text_input("How many do you think each stylist can sell a day?", key="per_stylist_input",
                      on_change=on_promotion_input, args=("units_per_stylist_per_day", "per_stylist_input"))

    # Outcome
    st.header("Outcome")
    out_col1, out_col2, out_col3 = st.columns(3)
    with out_col1:
        st.metric("Your stylists will sell (per day)", format_units(result.salon_units_per_day))
        st.caption(f"{format_units(result.per_day_units)} per stylist per day")
    with out_col2:
        st.metric("Your stylists will sell (promotion total)", format_units(result.total_units))
    with out_col3:
        st.metric("This will cost you", format_currency(result.total_cost))
    st.caption("Cost = total units × salon cost.")

    # Profit & revenue
    st.header("Profit & Revenue")
    if result.price_below_cost:
        st.warning("The RRP is below the salon cost: every unit sold loses money.")

    kpi_col1, kpi_col2, kpi_col3 = st.columns(3)
    with kpi_col1:
        st.metric("Profit per unit", format_currency(result.unit_profit))
        st.caption(f"{format_percent(result.margin_percent)} margin")
    with kpi_col2:
        st.metric("Revenue per day", format_currency(result.day_revenue))
        st.caption(f"{format_units(result.salon_units_per_day)} units × RRP")
    with kpi_col3:
        st.metric("Profit per day", format_currency(result.day_profit))
        st.caption(f"{format_units(result.salon_units_per_day)} × unit profit")

    total_col1, total_col2 = st.columns(2)
    with total_col1:
        st.metric("Revenue (promotion total)", format_currency(result.total_revenue))
    with total_col2:
        st.metric("Profit (promotion total)", format_currency(result.total_profit))

    chart_col1, chart_col2 = st.columns(2)
    with chart_col1:
        st.plotly_chart(outcome_figure(result), use_container_width=True)
    with chart_col2:
        st.plotly_chart(projection_figure(inputs), use_container_width=True)

with scenarios_tab:
    st.header("Scenario Comparison")
    st.markdown(f"Save up to {config.MAX_SCENARIOS} promotions and compare them side by side.")

    try:
        scenarios = load_scenarios(config.PROFILE)
    except SQLAlchemyError as e:
        logger.warning("Could not load scenarios: %s", e)
        st.error("Saved scenarios are unavailable right now.")
        scenarios = {}

    with st.form("save_scenario_form"):
        scenario_name = st.text_input("Scenario name", value=selection.product_name or "My promotion")
        scenario_description = st.text_area("Description", value="")
        submit = st.form_submit_button("Save current promotion")

        if submit:
            if not scenario_name.strip():
                st.error("Please enter a scenario name")
            else:
                try:
                    ok, message = save_scenario(config.PROFILE, scenario_name.strip(), scenario_description,
                                                scenario_payload(selection, inputs))
                except SQLAlchemyError as e:
                    logger.warning("Could not save scenario %r: %s", scenario_name, e)
                    ok, message = False, "Scenario could not be saved"
                if ok:
                    st.success(message)
                    st.rerun()
                else:
                    st.error(message)

    if scenarios:
        for name, scenario in scenarios.items():
            scenario_col1, scenario_col2, scenario_col3 = st.columns([4, 1, 1])
            with scenario_col1:
                st.write(f"**{name}** ({scenario['timestamp']}) {scenario.get('description') or ''}")
            with scenario_col2:
                st.button("Load", key=f"load_{name}", on_click=apply_scenario, args=(scenario,))
            with scenario_col3:
                if st.button("Delete", key=f"delete_{name}"):
                    try:
                        delete_scenario(config.PROFILE, name)
                    except SQLAlchemyError as e:
                        logger.warning("Could not delete scenario %r: %s", name, e)
                        st.error("Scenario could not be deleted")
                    else:
                        st.rerun()

        detailed_df = build_comparison_frame(scenarios)
        st.dataframe(detailed_df, use_container_width=True)

        st.download_button(
            label="Download Comparison as Excel",
            data=comparison_to_excel(detailed_df),
            file_name=f"scenario_comparison_{datetime.now().strftime('%Y-%m-%d')}.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
    else:
        st.info("No scenarios saved yet.")
