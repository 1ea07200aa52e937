from analytics.pipeline import run_analysis
from analytics.summary import category_sales_table
from config.config import AnalysisConfig
from utils.data_generation import generate_synthetic_purchases


def demo_customer_analytics(example_customer_id: int = 173, num_purchases: int = 2000):
    # Generate a purchase log shaped like the production CSV export
    purchases_df, _ = generate_synthetic_purchases(num_customers=300, num_purchases=num_purchases)
    rows = purchases_df.to_dict(orient="records")

    config = AnalysisConfig.from_env()
    result = run_analysis(rows, config)
    if not result.ok:
        print(f"Analysis finished with status {result.status.value}: {result.error_kind} {result.error_message}")
        return result, None

    print("\nTop categories by sales:")
    print(category_sales_table(rows).head(6).to_string(index=False))

    print("\nSegment sizes:")
    for label, stats in result.summary.segments.items():
        print(f"  {label}: {stats.count} customers, avg order {stats.avg_spent:.2f}")

    print("\nFirst segment assignments:")
    for assignment in result.segments[:10]:
        print(
            f"  Customer {assignment.customer_id}: {assignment.segment} "
            f"(likes {assignment.most_used_category}, favorite {assignment.favorite_product})"
        )

    insight = result.customer_insight(example_customer_id)
    print(f"\nCustomer {example_customer_id} purchase history (total {insight.total_spent:.2f}):")
    for tx in insight.history:
        print(f"  {tx.product_category} - ${tx.purchase_amount:.2f}")

    recommendations = insight.recommendations
    print(f"\nRecommendations for customer {example_customer_id}:")
    for rec in recommendations:
        print(f"  {rec.name} ({rec.category}) - Confidence: {rec.score * 100:.1f}%")

    return result, recommendations


if __name__ == "__main__":
    demo_customer_analytics()
