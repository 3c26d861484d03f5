from pydantic import BaseModel, Field
from typing import Optional


class Genome(BaseModel):
    """Schema for genome response."""

    id: int = Field(..., description="Database primary key", gt=0)
    name: str = Field(..., description="Species name", examples=["homo_sapiens", "mus_musculus"])
    assembly: Optional[str] = Field(None, description="Genome assembly", examples=["GRCh37"])

    class Config:
        from_attributes = True


class Dataset(BaseModel):
    """Schema for dataset response."""

    id: int = Field(..., description="Database primary key", gt=0)
    name: str = Field(..., description="Dataset name", examples=["human_body_map_2"])
    description: Optional[str] = None

    class Config:
        from_attributes = True


class Sample(BaseModel):
    """
    Schema for sample response.

    **What**: One tissue/condition of a dataset
    """

    id: int = Field(..., description="Database primary key", gt=0)
    name: str = Field(..., description="Sample (tissue) name", examples=["liver", "brain"])
    description: Optional[str] = None
    dataset_id: int = Field(..., description="Owning dataset", gt=0)

    class Config:
        from_attributes = True


class ExternalDb(BaseModel):
    """Schema for external database response."""

    id: int = Field(..., gt=0)
    name: str = Field(..., examples=["Pfam", "miRBase"])
    release: Optional[str] = None

    class Config:
        from_attributes = True
