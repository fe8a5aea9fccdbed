# backend/models/product.py
import enum
from sqlalchemy import Column, Integer, String, DateTime, Enum, CheckConstraint, func
from database import Base

# Fixed product classification
class Category(str, enum.Enum):
    grafico = "grafico"
    estrutura_lojas = "estrutura_lojas"
    brindes = "brindes"

CATEGORY_LABELS = {
    Category.grafico: "Gráfico",
    Category.estrutura_lojas: "Estrutura de Lojas",
    Category.brindes: "Brindes",
}

MAX_IMAGES = 3

# Stock level bands shown next to each product
LOW_STOCK_LEVEL = 5
MEDIUM_STOCK_LEVEL = 20


# Model Product
# A catalog item that can be withdrawn. The name is unique in practice and
# is used as the natural key when restocking an existing material.
class Product(Base):
    __tablename__ = "produtos"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    category = Column(Enum(Category), nullable=False, index=True)

    available_quantity = Column(
        Integer, CheckConstraint("available_quantity >= 0"), nullable=False, default=0
    )

    # Up to three images; cover_image_index points into image_urls
    image_1_url = Column(String, nullable=True)
    image_2_url = Column(String, nullable=True)
    image_3_url = Column(String, nullable=True)
    cover_image_index = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def image_urls(self):
        return [u for u in (self.image_1_url, self.image_2_url, self.image_3_url) if u]

    @image_urls.setter
    def image_urls(self, urls):
        urls = list(urls or [])[:MAX_IMAGES]
        urls += [None] * (MAX_IMAGES - len(urls))
        self.image_1_url, self.image_2_url, self.image_3_url = urls

    @property
    def cover_image_url(self):
        urls = self.image_urls
        if not urls:
            return None
        idx = self.cover_image_index or 0
        return urls[idx] if idx < len(urls) else urls[0]

    @property
    def category_label(self):
        return CATEGORY_LABELS.get(self.category, str(self.category))

    @property
    def stock_level(self) -> str:
        qty = self.available_quantity or 0
        if qty <= LOW_STOCK_LEVEL:
            return "low"
        if qty <= MEDIUM_STOCK_LEVEL:
            return "medium"
        return "high"
