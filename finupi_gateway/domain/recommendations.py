"""Human-readable feedback for a trust score"""

from typing import List

from finupi_gateway.domain.models import ScoreComponents

DEFAULT_SUGGESTION = "Your score is good! Continue maintaining your current financial habits."


def score_message(score: int) -> str:
    if score >= 800:
        return "You have an excellent trust score! You qualify for the best loan rates."
    if score >= 740:
        return "You have a very good trust score and qualify for favorable loan terms."
    if score >= 670:
        return "You have a good trust score. Most lenders will approve your applications."
    if score >= 580:
        return "Your trust score is fair. You may face higher interest rates."
    return "Your trust score needs improvement. Focus on the suggestions below."


def improvement_suggestions(score: int, components: ScoreComponents) -> List[str]:
    """One suggestion per weak component, plus a general one below 700"""
    suggestions = []

    if components.payment_history < 80:
        suggestions.append("Make all payments on time to improve your payment history score.")
    if components.credit_utilization < 80:
        suggestions.append("Spend less than you receive each month to lower your credit utilization.")
    if components.credit_age < 70:
        suggestions.append("Keep using your UPI account regularly to build a longer payment history.")
    if components.upi_activity < 80:
        suggestions.append("Use UPI for everyday payments to increase your activity score.")
    if components.transaction_patterns < 80:
        suggestions.append("Keep your payment amounts and timing consistent month to month.")

    if score < 700:
        suggestions.append("Pay down existing debts to improve your overall trust score.")

    return suggestions or [DEFAULT_SUGGESTION]
