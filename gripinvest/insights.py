"""
Rule based insights for the portfolio and activity log pages.

- generate_portfolio_insights: diversification, return and risk share notes
- generate_error_insights: one sentence per failing status code
- compute_health_score: 0-100 score with a per-component breakdown
"""

from typing import List

from gripinvest.helpers import calculate_percentage

DIVERSIFICATION_MAX = 30
RISK_BALANCE_MAX = 30
RETURNS_MAX = 20
ACTIVE_MAX = 20


def generate_portfolio_insights(summary: dict, risk_distribution: List[dict]) -> List[str]:
    """Build human readable notes from the portfolio summary and risk split."""
    insights = []

    risk_types = len(risk_distribution)
    if risk_types == 1:
        insights.append('Consider diversifying across different risk levels to balance your portfolio')
    elif risk_types >= 3:
        insights.append('Great! Your portfolio is well-diversified across risk levels')

    total_gains = float(summary.get('total_gains') or 0)
    total_invested = float(summary.get('total_invested') or 0)

    if total_invested > 0:
        return_pct = calculate_percentage(total_gains, total_invested)
        if return_pct > 10:
            insights.append(f'Excellent! Your portfolio is generating {return_pct:.2f}% returns')
        elif return_pct > 5:
            insights.append(f'Your portfolio is generating {return_pct:.2f}% returns - on track!')
        else:
            insights.append('Consider exploring higher-yield products to improve returns')

        for risk in risk_distribution:
            share = round(float(risk['total_amount'] or 0) / total_invested * 100, 1)
            insights.append(f"{risk['risk_level'].upper()} risk: {share:.1f}% of portfolio")

    return insights


def generate_error_insights(error_summary: List[dict]) -> List[str]:
    """Explain grouped error counts from the request log."""
    if not error_summary:
        return ['No errors detected. All transactions are successful!']

    insights = []
    for row in error_summary:
        status_code = row['status_code']
        count = row['error_count']
        if status_code == 401:
            insights.append(f"{count} authentication error(s). Make sure you're logged in with a valid token")
        elif status_code == 403:
            insights.append(f"{count} authorization error(s). You don't have permission for these actions")
        elif status_code == 404:
            insights.append(f'{count} not found error(s). Check if resources exist before accessing')
        elif status_code == 400:
            insights.append(f'{count} validation error(s). Review your input data')
        elif status_code >= 500:
            insights.append(f'{count} server error(s). Contact support if issues persist')
    return insights


def _health_status(score: int) -> str:
    if score > 80:
        return 'Excellent'
    if score > 60:
        return 'Good'
    if score > 40:
        return 'Fair'
    return 'Needs Attention'


def compute_health_score(active_investments: List[dict]) -> dict:
    """
    Score the active part of a portfolio.

    Args:
        active_investments: Rows with amount, expected_return,
            investment_type and risk_level.

    Returns:
        Dict with score, status, breakdown and tips.
    """
    if not active_investments:
        return {
            'score': 0,
            'status': 'No Investments',
            'breakdown': {},
            'tips': ['Start investing to build your portfolio health score'],
        }

    total = sum(float(inv['amount'] or 0) for inv in active_investments)
    expected = sum(float(inv['expected_return'] or 0) for inv in active_investments)

    types = {inv['investment_type'] for inv in active_investments}
    diversification = min(DIVERSIFICATION_MAX, 10 * len(types))

    by_risk = {}
    for inv in active_investments:
        by_risk[inv['risk_level']] = by_risk.get(inv['risk_level'], 0) + float(inv['amount'] or 0)
    largest_share = max(by_risk.values()) / total * 100 if total else 100
    if largest_share <= 60:
        risk_balance = RISK_BALANCE_MAX
    elif largest_share <= 80:
        risk_balance = 20
    else:
        risk_balance = 10

    return_pct = calculate_percentage(expected - total, total)
    if return_pct >= 10:
        returns = RETURNS_MAX
    elif return_pct >= 5:
        returns = 15
    elif return_pct > 0:
        returns = 10
    else:
        returns = 0

    active = min(ACTIVE_MAX, 5 * len(active_investments))

    tips = []
    if diversification < DIVERSIFICATION_MAX:
        tips.append('Spread money across more investment types (bonds, FDs, mutual funds, ETFs)')
    if risk_balance < RISK_BALANCE_MAX:
        tips.append('Reduce concentration in a single risk level')
    if returns < RETURNS_MAX:
        tips.append('Add higher-yield products to lift expected returns')
    if active < ACTIVE_MAX:
        tips.append('Hold at least four active investments')

    score = diversification + risk_balance + returns + active
    return {
        'score': score,
        'status': _health_status(score),
        'breakdown': {
            'diversification': diversification,
            'riskBalance': risk_balance,
            'returns': returns,
            'activeInvestments': active,
        },
        'tips': tips,
    }
