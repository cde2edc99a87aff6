from pydantic import BaseModel, Field


class GenerateSuccess(BaseModel):
    """Body of a successful /api/generate response."""
    image_url: str = Field(alias="imageUrl", description="URL of the Ghibli-style image")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "imageUrl": "https://example.com/generated-image.png"
            }
        }


class GenerateError(BaseModel):
    """Body of a failed /api/generate response."""
    error: str = Field(description="One user-facing sentence describing the failure")

    class Config:
        json_schema_extra = {
            "example": {
                "error": "Image file too large. Maximum size is 4MB."
            }
        }
