"""
Unit Tests - Product Performance
"""
from datetime import date

import polars as pl
import pytest

from warehouse_analytics.analytics import category_contribution, yearly_product_performance


class TestYearlyProductPerformance:
    """Tests for yearly_product_performance"""
    
    def test_compares_with_average_and_previous_year(self, sample_sales_df, sample_products_df):
        """Test average and lag comparisons for a product with two years"""
        result = yearly_product_performance(sample_sales_df, sample_products_df)
        road_bike = result.filter(pl.col("product_name") == "Road Bike").to_dicts()
        
        assert [row["order_year"] for row in road_bike] == [2023, 2024]
        
        first, second = road_bike
        assert first["current_sales"] == 4000
        assert first["avg_sales_per_product"] == 2950
        assert first["diff_from_avg_sales"] == 1050
        assert first["avg_change"] == "Above Average"
        assert first["previous_year_sales"] is None
        assert first["diff_previous_year_sales"] is None
        assert first["previous_year_change"] is None
        
        assert second["current_sales"] == 1900
        assert second["diff_from_avg_sales"] == -1050
        assert second["avg_change"] == "Below Average"
        assert second["previous_year_sales"] == 4000
        assert second["diff_previous_year_sales"] == -2100
        assert second["previous_year_change"] == "Decrease"
    
    def test_increase_label(self, sample_sales_df, sample_products_df):
        """Test a year above the previous one is labelled Increase"""
        result = yearly_product_performance(sample_sales_df, sample_products_df)
        jersey = result.filter(
            (pl.col("product_name") == "Jersey") & (pl.col("order_year") == 2024)
        ).row(0, named=True)
        
        assert jersey["current_sales"] == 2300
        assert jersey["diff_previous_year_sales"] == 800
        assert jersey["previous_year_change"] == "Increase"
        assert jersey["avg_change"] == "Above Average"
    
    def test_lag_difference_matches_label(self, sample_sales_df, sample_products_df):
        """Test every lag difference is current minus previous, labelled by sign"""
        result = yearly_product_performance(sample_sales_df, sample_products_df)
        labels = {1: "Increase", -1: "Decrease", 0: "Average"}
        
        for row in result.filter(pl.col("previous_year_sales").is_not_null()).to_dicts():
            diff = row["current_sales"] - row["previous_year_sales"]
            assert row["diff_previous_year_sales"] == diff
            assert row["previous_year_change"] == labels[(diff > 0) - (diff < 0)]
    
    def test_equal_to_average(self):
        """Test a year equal to the product average is labelled Average"""
        sales = pl.DataFrame({
            "product_key": [1, 1],
            "order_date": [date(2023, 3, 1), date(2024, 3, 1)],
            "sales_amount": [500, 500],
        })
        products = pl.DataFrame({"product_key": [1], "product_name": ["Cap"]})
        
        result = yearly_product_performance(sales, products)
        
        assert result["avg_change"].to_list() == ["Average", "Average"]
        assert result["previous_year_change"].to_list() == [None, "Average"]
    
    def test_average_year_tie_rounds_up(self):
        """Test a half-unit yearly average rounds away from zero"""
        sales = pl.DataFrame({
            "product_key": [1, 1],
            "order_date": [date(2023, 3, 1), date(2024, 3, 1)],
            "sales_amount": [100, 101],
        })
        products = pl.DataFrame({"product_key": [1], "product_name": ["Cap"]})

        result = yearly_product_performance(sales, products)

        assert result["avg_sales_per_product"].to_list() == [101, 101]
        assert result["avg_change"].to_list() == ["Below Average", "Average"]

    def test_excludes_undated_sales(self, sample_sales_df, sample_products_df):
        """Test sales without an order date are not attributed to any year"""
        result = yearly_product_performance(sample_sales_df, sample_products_df)
        
        assert result["order_year"].null_count() == 0
        assert result["current_sales"].sum() == 11720
    
    def test_unknown_product_has_null_name(self, sample_sales_df, sample_products_df):
        """Test sales of a product missing from the dimension are kept"""
        result = yearly_product_performance(sample_sales_df, sample_products_df)
        unknown = result.filter(pl.col("product_name").is_null())
        
        assert unknown.height == 1
        assert unknown["current_sales"][0] == 700


class TestCategoryContribution:
    """Tests for category_contribution"""
    
    def test_shares(self, sample_sales_df, sample_products_df):
        """Test category totals and formatted shares"""
        result = category_contribution(sample_sales_df, sample_products_df)
        
        assert result["category"].to_list() == ["Bikes", "Clothing", "Accessories", None]
        assert result["total_sales"].to_list() == [6400, 3800, 1320, 700]
        assert result["overall_sales"].unique().to_list() == [12220]
        assert result["percentage_of_sales"].to_list() == ["52.37%", "31.10%", "10.80%", "5.73%"]
    
    def test_shares_sum_to_100(self, sample_sales_df, sample_products_df):
        """Test the percentages add up to 100 within rounding"""
        result = category_contribution(sample_sales_df, sample_products_df)
        
        assert result["sales_share_pct"].sum() == pytest.approx(100.0, abs=0.05)
    
    def test_share_tie_rounds_up(self):
        """Test a 0.145% share is shown as 0.15%"""
        sales = pl.DataFrame({"product_key": [1, 2], "sales_amount": [29, 19971]})
        products = pl.DataFrame({"product_key": [1, 2], "category": ["Caps", "Bikes"]})

        result = category_contribution(sales, products)

        assert result["percentage_of_sales"].to_list() == ["99.86%", "0.15%"]
        assert result["sales_share_pct"].to_list() == [99.86, 0.15]

    def test_zero_total(self):
        """Test shares stay null when nothing was sold"""
        sales = pl.DataFrame({"product_key": [1], "sales_amount": [0]})
        products = pl.DataFrame({"product_key": [1], "category": ["Bikes"]})
        
        result = category_contribution(sales, products)
        
        assert result["overall_sales"][0] == 0
        assert result["percentage_of_sales"][0] is None
