"""
Unit Tests - Synthetic Data
"""
import polars as pl

from warehouse_analytics.data.generators import (
    CustomerGenerator,
    DataGenerator,
    ProductGenerator,
    SalesGenerator,
)
from warehouse_analytics.database.models import CUSTOMER_SCHEMA, SALES_SCHEMA
from warehouse_analytics.ingestion.loader import FileFormat, load_from_directory


class TestGenerators:
    """Tests for the table generators"""
    
    def test_customers(self):
        """Test customer keys and schema"""
        customers = CustomerGenerator(seed=1).generate(25)
        
        assert customers.schema == CUSTOMER_SCHEMA
        assert customers["customer_key"].to_list() == list(range(1, 26))
    
    def test_sales_grain(self):
        """Test one row per product per order"""
        customers = CustomerGenerator(seed=1).generate(20)
        products = ProductGenerator(seed=1).generate(10)
        
        sales = SalesGenerator(customers, products, seed=1).generate(200)
        
        assert sales.schema == SALES_SCHEMA
        assert sales.select(["order_number", "product_key"]).n_unique() == sales.height
        assert (sales["sales_amount"] == sales["price"] * sales["quantity"]).all()
    
    def test_missing_dates_and_dangling_keys(self):
        """Test the rates for undated rows and unknown keys"""
        customers = CustomerGenerator(seed=3).generate(5)
        products = ProductGenerator(seed=3).generate(5)
        
        sales = SalesGenerator(
            customers,
            products,
            seed=3,
            missing_date_rate=1.0,
            dangling_key_rate=1.0,
        ).generate(20)
        
        assert sales["order_date"].null_count() == sales.height
        assert (sales["product_key"] > 5).all()
        assert (sales["customer_key"] > 5).all()
    
    def test_seed_is_reproducible(self):
        """Test the same seed yields the same products"""
        first = ProductGenerator(seed=9).generate(15)
        second = ProductGenerator(seed=9).generate(15)
        
        assert first.equals(second)
    
    def test_no_customers(self):
        """Test sales generation without dimension rows"""
        sales = SalesGenerator(
            pl.DataFrame(schema=CUSTOMER_SCHEMA),
            ProductGenerator(seed=1).generate(3),
        ).generate(10)
        
        assert sales.height == 0


class TestDataGenerator:
    """Tests for DataGenerator"""
    
    def test_generate_all_saves_loadable_tables(self, tmp_path):
        """Test generated files load as a snapshot in both formats"""
        data = DataGenerator(tmp_path, seed=7).generate_all(
            n_customers=30,
            n_products=12,
            n_orders=60,
        )
        
        assert set(data) == {"dim_customers", "dim_products", "fact_sales"}
        
        for file_format in FileFormat:
            snapshot = load_from_directory(tmp_path, file_format)
            assert snapshot.row_counts == {
                "customers": 30,
                "products": 12,
                "sales": data["fact_sales"].height,
            }
    
    def test_generate_without_saving(self, tmp_path):
        """Test nothing is written when save is disabled"""
        DataGenerator(tmp_path / "out", seed=7).generate_all(
            n_customers=5,
            n_products=5,
            n_orders=5,
            save=False,
        )
        
        assert not (tmp_path / "out").exists()
