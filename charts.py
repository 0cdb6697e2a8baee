import numpy as np
import plotly.graph_objects as go

from pricing import PromotionInputs, PromotionResult, daily_projection

LEGEND_TOP = dict(
    orientation="h",
    yanchor="bottom",
    y=1.02,
    xanchor="right",
    x=1
)


def outcome_figure(result: PromotionResult):
    """Bar chart of promotion cost, revenue and profit"""
    labels = ['Cost', 'Revenue', 'Profit']
    values = [result.total_cost, result.total_revenue, result.total_profit]
    colours = [
        'rgba(255, 0, 0, 0.7)',
        'rgba(0, 128, 0, 0.7)',
        'rgba(0, 0, 255, 0.7)' if result.total_profit >= 0 else 'rgba(128, 0, 0, 0.7)',
    ]

    fig = go.Figure(data=[
        go.Bar(
            x=labels,
            y=values,
            marker=dict(color=colours),
            text=[f"£{v:,.2f}" for v in values],
            textposition='auto'
        )
    ])

    fig.update_layout(
        title="Promotion Outcome",
        yaxis_title="Amount (£)",
        height=400
    )
    return fig


def projection_figure(inputs: PromotionInputs):
    """Cumulative revenue, cost and profit over the promotion"""
    projection = daily_projection(inputs)

    fig = go.Figure()

    fig.add_trace(go.Scatter(
        x=projection['Day'],
        y=projection['Revenue'],
        mode='lines+markers',
        name='Revenue',
        line=dict(color='rgba(0, 128, 0, 0.8)', width=2)
    ))

    fig.add_trace(go.Scatter(
        x=projection['Day'],
        y=projection['Cost'],
        mode='lines+markers',
        name='Cost',
        line=dict(color='rgba(255, 0, 0, 0.8)', width=2)
    ))

    fig.add_trace(go.Scatter(
        x=projection['Day'],
        y=projection['Profit'],
        mode='lines',
        name='Profit',
        line=dict(color='rgba(0, 0, 255, 0.8)', width=2),
        fill='tozeroy'
    ))

    # Mark the first day the promotion is in profit
    in_profit = np.where(projection['Profit'].to_numpy(dtype=float) > 0)[0]
    if len(in_profit) > 0:
        first = in_profit[0]
        fig.add_trace(go.Scatter(
            x=[projection['Day'].iloc[first]],
            y=[projection['Profit'].iloc[first]],
            mode='markers',
            name='First Profitable Day',
            marker=dict(color='purple', size=10)
        ))

    fig.update_layout(
        title="Promotion Projection: Running Totals",
        xaxis_title="Day",
        yaxis_title="Amount (£)",
        legend=LEGEND_TOP,
        height=450
    )
    return fig
