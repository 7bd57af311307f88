"""
Synthetic Data Generator

Generates a realistic gold-layer star schema for testing and development.
Includes:
- Customer dimension with demographics
- Product dimension across categories with costs
- Sales fact rows with order lines spread over several years

A share of sales has no order date and a share references dimension keys
that do not exist, so the null-handling paths of every report get exercised.
"""

import random
from datetime import date, timedelta
from pathlib import Path
from typing import Dict, Optional, Union

import numpy as np
import polars as pl
import structlog
from faker import Faker

from warehouse_analytics.config import get_settings
from warehouse_analytics.database.models import (
    CUSTOMER_SCHEMA,
    PRODUCT_SCHEMA,
    SALES_SCHEMA,
    DimCustomer,
    DimProduct,
    FactSale,
)

logger = structlog.get_logger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

CATEGORIES = [
    ("Bikes", ["Mountain Bikes", "Road Bikes", "Touring Bikes"], (400, 2200)),
    ("Components", ["Frames", "Wheels", "Handlebars", "Brakes"], (20, 900)),
    ("Clothing", ["Jerseys", "Shorts", "Gloves", "Caps"], (2, 60)),
    ("Accessories", ["Helmets", "Bottles and Cages", "Tires and Tubes", "Locks"], (1, 40)),
]

PRODUCT_LINES = ["Mountain", "Road", "Touring", "Other Sales"]
COUNTRIES = ["United States", "Australia", "United Kingdom", "Germany", "France", "Canada"]
MARITAL_STATUSES = ["Married", "Single"]
GENDERS = ["Male", "Female"]


# =============================================================================
# GENERATORS
# =============================================================================

class CustomerGenerator:
    """Generate customer dimension rows"""
    
    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)
        self.fake = Faker()
        if seed is not None:
            self.fake.seed_instance(seed)
    
    def generate(self, n: int = 1000) -> pl.DataFrame:
        """Generate n customers with keys 1..n"""
        customers = []
        
        for key in range(1, n + 1):
            customers.append({
                "customer_key": key,
                "customer_id": 11000 + key,
                "customer_number": f"AW{11000 + key:08d}",
                "first_name": self.fake.first_name(),
                "last_name": self.fake.last_name(),
                "country": self.rng.choice(COUNTRIES),
                "marital_status": self.rng.choice(MARITAL_STATUSES),
                "gender": self.rng.choice(GENDERS + ["n/a"]),
                # Some customers never reported a birthdate
                "birthdate": self.fake.date_of_birth(minimum_age=18, maximum_age=90)
                if self.rng.random() > 0.02 else None,
                "create_date": self.fake.date_between(start_date="-6y", end_date="-1y"),
            })
        
        return pl.DataFrame(customers, schema=CUSTOMER_SCHEMA)


class ProductGenerator:
    """Generate product dimension rows"""
    
    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)
        self.fake = Faker()
        if seed is not None:
            self.fake.seed_instance(seed)
    
    def generate(self, n: int = 300) -> pl.DataFrame:
        """Generate n products with keys 1..n"""
        products = []
        
        for key in range(1, n + 1):
            category, subcategories, (low, high) = self.rng.choice(CATEGORIES)
            subcategory = self.rng.choice(subcategories)
            
            products.append({
                "product_key": key,
                "product_id": 200 + key,
                "product_number": f"{category[:2].upper()}-{key:04d}",
                "product_name": f"{self.fake.word().title()} {subcategory} {key}",
                "category_id": f"{category[:2].upper()}_{subcategory[:2].upper()}",
                "category": category,
                "subcategory": subcategory,
                "maintenance": self.rng.choice(["Yes", "No"]),
                "cost": self.rng.randint(low, high),
                "product_line": self.rng.choice(PRODUCT_LINES),
                "start_date": self.fake.date_between(start_date="-6y", end_date="-2y"),
            })
        
        return pl.DataFrame(products, schema=PRODUCT_SCHEMA)


class SalesGenerator:
    """Generate sales fact rows for existing customers and products"""
    
    def __init__(
        self,
        customers_df: pl.DataFrame,
        products_df: pl.DataFrame,
        seed: Optional[int] = None,
        missing_date_rate: float = 0.01,
        dangling_key_rate: float = 0.005,
    ):
        self.customer_keys = customers_df["customer_key"].to_list()
        self.product_data = products_df.select(["product_key", "cost"]).to_dicts()
        self.rng = random.Random(seed)
        self.np_rng = np.random.default_rng(seed)
        self.missing_date_rate = missing_date_rate
        self.dangling_key_rate = dangling_key_rate
        self._max_customer_key = max(self.customer_keys, default=0)
        self._max_product_key = max((p["product_key"] for p in self.product_data), default=0)
    
    def _customer_key(self) -> int:
        if self.rng.random() < self.dangling_key_rate:
            return self._max_customer_key + self.rng.randint(1, 1000)
        return self.rng.choice(self.customer_keys)
    
    def _product(self) -> dict:
        product = self.rng.choice(self.product_data)
        if self.rng.random() < self.dangling_key_rate:
            return {"product_key": self._max_product_key + self.rng.randint(1, 1000), "cost": product["cost"]}
        return product
    
    def generate(
        self,
        n_orders: int = 5000,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> pl.DataFrame:
        """Generate order lines for n orders"""
        end_date = end_date or date.today()
        start_date = start_date or end_date - timedelta(days=4 * 365)
        span_days = max((end_date - start_date).days, 0)
        
        if not self.customer_keys or not self.product_data:
            return pl.DataFrame(schema=SALES_SCHEMA)
        
        sales = []
        
        for order_idx in range(n_orders):
            order_number = f"SO{43697 + order_idx}"
            customer_key = self._customer_key()
            order_date = start_date + timedelta(days=self.rng.randint(0, span_days))
            
            # Most orders have 1-3 lines
            num_lines = int(self.np_rng.choice(
                [1, 2, 3, 4, 5],
                p=[0.45, 0.30, 0.15, 0.07, 0.03],
            ))
            
            seen_products = set()
            for _ in range(num_lines):
                product = self._product()
                # One line per product per order
                if product["product_key"] in seen_products:
                    continue
                seen_products.add(product["product_key"])
                
                quantity = int(self.np_rng.choice([1, 2, 3, 4], p=[0.85, 0.10, 0.03, 0.02]))
                price = max(int(round(product["cost"] * self.rng.uniform(1.2, 1.8))), 1)
                
                missing_date = self.rng.random() < self.missing_date_rate
                sales.append({
                    "order_number": order_number,
                    "product_key": product["product_key"],
                    "customer_key": customer_key,
                    "order_date": None if missing_date else order_date,
                    "shipping_date": order_date + timedelta(days=7),
                    "due_date": order_date + timedelta(days=12),
                    "sales_amount": price * quantity,
                    "quantity": quantity,
                    "price": price,
                })
        
        return pl.DataFrame(sales, schema=SALES_SCHEMA)


# =============================================================================
# MAIN GENERATOR
# =============================================================================

class DataGenerator:
    """Main data generator orchestrator"""
    
    def __init__(
        self,
        output_dir: Optional[Union[str, Path]] = None,
        seed: Optional[int] = 42,
    ):
        self.output_dir = Path(output_dir or get_settings().data.input_path)
        self.seed = seed
    
    def generate_all(
        self,
        n_customers: int = 1000,
        n_products: int = 300,
        n_orders: int = 5000,
        save: bool = True,
    ) -> Dict[str, pl.DataFrame]:
        """Generate the three warehouse tables, keyed by table name"""
        logger.info(
            "Generating synthetic warehouse data",
            customers=n_customers,
            products=n_products,
            orders=n_orders,
            seed=self.seed,
        )
        
        customers_df = CustomerGenerator(self.seed).generate(n_customers)
        products_df = ProductGenerator(self.seed).generate(n_products)
        sales_df = SalesGenerator(customers_df, products_df, seed=self.seed).generate(n_orders)
        
        data = {
            DimCustomer.__tablename__: customers_df,
            DimProduct.__tablename__: products_df,
            FactSale.__tablename__: sales_df,
        }
        
        if save:
            self._save_data(data)
        
        logger.info("Data generation complete", sales_rows=len(sales_df))
        return data
    
    def _save_data(self, data: Dict[str, pl.DataFrame]) -> None:
        """Save generated tables as Parquet and CSV"""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        
        for name, df in data.items():
            parquet_path = self.output_dir / f"{name}.parquet"
            df.write_parquet(parquet_path)
            
            # Also save as CSV for file-format tests
            df.write_csv(self.output_dir / f"{name}.csv")
            logger.info(f"Saved {name}: {len(df)} rows", path=str(parquet_path))
