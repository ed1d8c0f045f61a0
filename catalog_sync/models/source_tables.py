"""
Tables of the source catalog database.

The physical table and column names belong to the source system; the
``key`` of each column is the name used in Python code.
"""
from sqlalchemy import Column, Integer, LargeBinary, MetaData, Numeric, String, Table

metadata = MetaData()

catalog_items = Table(
    "cikk",
    metadata,
    Column("tkod", String(64), key="sku", primary_key=True),
    Column("megnev", String(255), key="name"),
    Column("ar1", Numeric(14, 4), key="price"),
    Column("keszl", Integer, key="stock"),
    Column("akcio", String(1), key="on_sale"),
    Column("netes2", String(1), key="web_flag"),
)

catalog_images = Table(
    "cikkkep",
    metadata,
    Column("kepid", Integer, key="image_id", primary_key=True),
    Column("kep", LargeBinary, key="data"),
)

catalog_image_links = Table(
    "cikkkepkapcs",
    metadata,
    Column("tkod", String(64), key="sku"),
    Column("kepid", Integer, key="image_id"),
)
