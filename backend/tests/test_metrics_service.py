import unittest

from kmdash.services import metrics_service as m
from kmdash.services.metrics_service import (
    DeliveryFacts,
    KnowledgeFacts,
    LeanFacts,
    MaterialFacts,
    SupplierFacts,
)


class StockStatusTests(unittest.TestCase):
    def test_boundaries(self):
        self.assertEqual(m.stock_status(0, 10), "Habis")
        self.assertEqual(m.stock_status(-3, 10), "Habis")
        self.assertEqual(m.stock_status(0.5, 10), "Rendah")
        self.assertEqual(m.stock_status(10, 10), "Rendah")
        self.assertEqual(m.stock_status(10.01, 10), "Cukup")
        self.assertEqual(m.stock_status(20, 10), "Cukup")
        self.assertEqual(m.stock_status(20.01, 10), "Optimal")

    def test_missing_values(self):
        self.assertEqual(m.stock_status(None, 10), "Habis")
        self.assertEqual(m.stock_status(5, None), "Optimal")

    def test_five_below_threshold_ten_is_low(self):
        self.assertEqual(m.stock_status(5, 10), "Rendah")


class SupplierScoreTests(unittest.TestCase):
    def test_overall_score_is_exact_mean(self):
        self.assertEqual(m.supplier_overall_score(9, 8, 7), 8.0)
        self.assertAlmostEqual(m.supplier_overall_score(9.2, 8.5, 9.0), (9.2 + 8.5 + 9.0) / 3)

    def test_strategic_partner_threshold(self):
        self.assertTrue(m.is_strategic_partner(8.5))
        self.assertTrue(m.is_strategic_partner(m.supplier_overall_score(9, 8.5, 8)))
        self.assertFalse(m.is_strategic_partner(8.49))

    def test_delivery_quality_score(self):
        self.assertEqual(m.delivery_quality_score("Excellent", "Good", 2), round((10 + 8 + 8) / 3, 1))
        self.assertEqual(m.delivery_quality_score(None, None, None), round(10 / 3, 1))
        self.assertEqual(m.delivery_quality_score("Poor", "Fair", 0), round((4 + 6 + 10) / 3, 1))

    def test_delivery_timeliness_score(self):
        self.assertEqual(m.delivery_timeliness_score(True, 0), 10.0)
        self.assertEqual(m.delivery_timeliness_score(False, 3), 8.5)
        self.assertEqual(m.delivery_timeliness_score(False, 30), 5.0)

    def test_waste_percentage(self):
        self.assertEqual(m.waste_percentage(5, 100), 5.0)
        self.assertEqual(m.waste_percentage(5, 0), 0.0)


class FormattingTests(unittest.TestCase):
    def test_rupiah(self):
        self.assertEqual(m.format_rupiah(1234567), "Rp 1.234.567")
        self.assertEqual(m.format_rupiah(0), "Rp 0")

    def test_safe_div(self):
        self.assertEqual(m.safe_div(5, 0), 0.0)
        self.assertEqual(m.mean([]), 0.0)
        self.assertEqual(m.mean([None, 4, 6]), 5.0)


class StockValueTests(unittest.TestCase):
    def test_empty(self):
        summary = m.stock_value_summary([])
        self.assertEqual(summary["total_value"]["amount"], 0)
        self.assertEqual(summary["total_value"]["formatted"], "Rp 0")
        self.assertEqual(summary["by_category"], [])
        self.assertEqual(summary["alerts"]["low_stock_count"], 0)

    def test_totals_and_categories(self):
        materials = [
            MaterialFacts("Katun", "Bahan Utama", 10, 35000, 5),
            MaterialFacts("Drill", "Bahan Utama", 2, 40000, 5),
            MaterialFacts("Benang", "Bahan Pendukung", 4, None, 10),
        ]
        summary = m.stock_value_summary(materials)
        self.assertEqual(summary["total_value"]["amount"], 430000)
        self.assertEqual(summary["total_value"]["formatted"], "Rp 430.000")
        self.assertEqual(summary["by_category"], [
            {"category": "Bahan Pendukung", "value": 0, "quantity": 4},
            {"category": "Bahan Utama", "value": 430000, "quantity": 12},
        ])
        self.assertEqual(summary["alerts"]["low_stock_count"], 2)
        self.assertEqual(
            [item["name"] for item in summary["alerts"]["critical_items"]],
            ["Drill", "Benang"],
        )

    def test_critical_items_are_capped(self):
        materials = [MaterialFacts(f"M{i}", "Aksesoris", 0, 100, 10) for i in range(8)]
        summary = m.stock_value_summary(materials)
        self.assertEqual(summary["alerts"]["low_stock_count"], 8)
        self.assertEqual(len(summary["alerts"]["critical_items"]), 5)


class VendorReliabilityTests(unittest.TestCase):
    def test_no_suppliers(self):
        result = m.vendor_reliability_index([])
        self.assertEqual(result["overall_index"], 0)
        self.assertEqual(result["total_suppliers"], 0)
        self.assertEqual(result["grade"], "C - Needs Improvement")

    def test_supplier_without_deliveries_scores_zero(self):
        score, rate = m.supplier_reliability(())
        self.assertEqual((score, rate), (0.0, 0.0))

    def test_weighted_score(self):
        deliveries = (
            DeliveryFacts(on_time=True, quality_score=9.0, delivery_score=10.0),
            DeliveryFacts(on_time=False, quality_score=7.0, delivery_score=8.0),
        )
        score, rate = m.supplier_reliability(deliveries)
        self.assertEqual(rate, 0.5)
        # 0.5 * 10 * 0.4 + 8 * 0.3 + 9 * 0.3
        self.assertAlmostEqual(score, 2.0 + 2.4 + 2.7)

    def test_index_and_recommendations(self):
        perfect = tuple(DeliveryFacts(True, 10.0, 10.0) for _ in range(3))
        late = (DeliveryFacts(False, 5.0, 5.0),)
        result = m.vendor_reliability_index([
            SupplierFacts(1, "PT Tekstil Nusantara", is_recommended=True, deliveries=perfect),
            SupplierFacts(2, "CV Lambat", deliveries=late),
        ])
        self.assertEqual(result["total_suppliers"], 2)
        self.assertEqual(result["recommended_suppliers"], 1)
        self.assertEqual(result["vendor_scores"][0]["score"], 10.0)
        self.assertEqual(result["vendor_scores"][0]["on_time_percentage"], 100.0)
        # (10 + 3) / 2
        self.assertEqual(result["overall_index"], 6.5)
        self.assertEqual(result["grade"], "C - Needs Improvement")
        kinds = sorted((r["supplier"], r["type"]) for r in result["recommendations"])
        self.assertEqual(kinds, [("CV Lambat", "action"), ("CV Lambat", "warning")])

    def test_grades(self):
        self.assertEqual(m.reliability_grade(9.0), "A+ - Excellent")
        self.assertEqual(m.reliability_grade(8.5), "A - Very Good")
        self.assertEqual(m.reliability_grade(8.0), "B+ - Good")
        self.assertEqual(m.reliability_grade(6.9), "C - Needs Improvement")


class KnowledgeHealthTests(unittest.TestCase):
    def test_empty_database(self):
        result = m.knowledge_health_score(KnowledgeFacts())
        self.assertEqual(result["overall_score"], 0)
        self.assertEqual(result["grade"], "F - Critical")
        self.assertEqual(len(result["recommendations"]), 3)

    def test_components_are_clamped(self):
        facts = KnowledgeFacts(
            total_materials=4,
            documented_materials=3,
            recent_lessons=20,          # 250% of target
            total_sops=2,
            fresh_sops=1,
            recent_externalizations=30,  # 200% of target
        )
        components = m.knowledge_components(facts)
        self.assertEqual(components["documentation_coverage"], 75.0)
        self.assertEqual(components["seci_activity"], 100.0)
        self.assertEqual(components["sop_freshness"], 50.0)
        self.assertEqual(components["tacit_conversion_rate"], 100.0)

        result = m.knowledge_health_score(facts)
        self.assertEqual(result["overall_score"], 81.2)
        self.assertEqual(result["grade"], "B - Good")

    def test_overall_is_quarter_weighted_sum(self):
        facts = KnowledgeFacts(
            total_materials=10, documented_materials=5,
            recent_lessons=4, total_sops=4, fresh_sops=4, recent_externalizations=3,
        )
        components = m.knowledge_components(facts)
        expected = sum(components.values()) * 0.25
        self.assertAlmostEqual(m.knowledge_health_score(facts)["overall_score"], round(expected, 1))


class LeanEfficiencyTests(unittest.TestCase):
    def test_no_data_is_world_class(self):
        result = m.lean_efficiency_score(LeanFacts())
        self.assertEqual(result["overall_score"], 100.0)
        self.assertEqual(result["grade"], "A - World Class")
        self.assertEqual(result["trend"]["change_percentage"], 0)
        self.assertEqual(result["waste_analysis"]["cost_percentage"], 0)

    def test_trend_score(self):
        self.assertEqual(m.trend_score(-12.0), 20.0)
        self.assertEqual(m.trend_score(0.0), 20.0)
        self.assertEqual(m.trend_score(5.0), 15.0)
        self.assertEqual(m.trend_score(50.0), 0.0)

    def test_waste_trend_percent(self):
        self.assertEqual(m.waste_trend_percent(5.0, 0.0), 0.0)
        self.assertAlmostEqual(m.waste_trend_percent(12.0, 10.0), 20.0)

    def test_weighted_score(self):
        facts = LeanFacts(
            current_waste_percentages=(10.0, 10.0),
            previous_waste_percentages=(8.0,),
            waste_incidents=4,
            preventable_incidents=2,
            total_waste_cost=50000,
            production_value=1000000,
            waste_by_category=(
                {"waste_category": "Cutting Error", "count": 3, "total_quantity": 6, "total_cost": 40000},
                {"waste_category": "Other", "count": 1, "total_quantity": 1, "total_cost": 10000},
            ),
        )
        result = m.lean_efficiency_score(facts)
        # trend +25% -> trend score 0; 0.5 * 90 + 0.3 * 50 + 0
        self.assertEqual(result["overall_score"], 60.0)
        self.assertEqual(result["grade"], "D - Needs Improvement")
        self.assertEqual(result["material_efficiency"]["percentage"], 90.0)
        self.assertEqual(result["material_efficiency"]["status"], "excellent")
        self.assertEqual(result["waste_analysis"]["preventable_percentage"], 50.0)
        self.assertEqual(result["waste_analysis"]["cost_percentage"], 5.0)
        self.assertEqual(result["trend"]["direction"], "worsening")
        areas = [r["area"] for r in result["recommendations"]]
        self.assertEqual(areas, ["Waste Category"])
        self.assertIn("Cutting Error", result["recommendations"][0]["message"])

    def test_grades(self):
        self.assertEqual(m.lean_grade(90), "A - World Class")
        self.assertEqual(m.lean_grade(85), "B - Competitive")
        self.assertEqual(m.lean_grade(80), "C - Average")
        self.assertEqual(m.lean_grade(79.9), "D - Needs Improvement")


if __name__ == "__main__":
    unittest.main()
