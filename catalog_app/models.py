from django.db import models
from django.conf import settings


# --- Locations & categories ---
class City(models.Model):
    """
    A city of the directory. Every catalog entity is located in one city.

    Attributes:
        name (CharField): Display name, e.g. "Chittorgarh".
        slug (SlugField): Unique, URL-friendly identifier.
        state (CharField): The state the city belongs to.
        is_active (BooleanField): Inactive cities are hidden from pickers.
    """
    name = models.CharField(max_length=120)
    slug = models.SlugField(max_length=140, unique=True)
    state = models.CharField(max_length=120, blank=True, default='')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = "Cities"

    def __str__(self):
        return self.name


class Area(models.Model):
    """
    A neighbourhood or locality inside a city.

    The slug only has to be unique within its city, two cities may both have
    a "Station Road".
    """
    city = models.ForeignKey(City, on_delete=models.CASCADE, related_name='areas')
    name = models.CharField(max_length=120)
    slug = models.SlugField(max_length=140)
    description = models.TextField(blank=True, default='')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(fields=['city', 'slug'], name='unique_area_slug_per_city'),
        ]

    def __str__(self):
        return f"{self.name}, {self.city.name}"


class Category(models.Model):
    """
    A category for one entity family.

    Business categories and tourism categories live in the same table and are
    told apart by `feature_type`. Slugs are unique per feature type.
    """
    class FeatureType(models.TextChoices):
        BUSINESS = 'business', 'Business'
        TOURISM = 'tourism', 'Tourism'

    name = models.CharField(max_length=120)
    slug = models.SlugField(max_length=140)
    description = models.TextField(blank=True, default='')
    feature_type = models.CharField(max_length=20, choices=FeatureType.choices)
    is_active = models.BooleanField(default=True)
    sort_order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['sort_order', 'name']
        verbose_name_plural = "Categories"
        constraints = [
            models.UniqueConstraint(fields=['feature_type', 'slug'], name='unique_category_slug_per_type'),
        ]

    def __str__(self):
        return f"{self.name} ({self.feature_type})"


# --- Catalog entities ---
class CatalogEntity(models.Model):
    """
    The fields shared by both catalog entity families (businesses and tourism places).

    This is an abstract model: it has no table of its own. `Business` and
    `TourismPlace` each get a full copy of these columns.

    Attributes:
        name (CharField): The display name of the entity.
        slug (SlugField): URL identifier, unique within the entity type.
        description (TextField): Long free-form description.
        address (CharField): Street address.
        city (ForeignKey): The city the entity is located in.
        area (ForeignKey): Optional area inside the city.
        is_featured (BooleanField): Highlighted by the editors.
        is_verified (BooleanField): Details were checked by an admin.
        created_at / updated_at (DateTimeField): Audit timestamps.
        published_at (DateTimeField): Set the first time the entity is published.
    """
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=220, unique=True)
    description = models.TextField(blank=True, default='')
    address = models.CharField(max_length=300, blank=True, default='')

    # Location. Entities survive the removal of a city or area, they just lose the reference.
    city = models.ForeignKey(City, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    area = models.ForeignKey(Area, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')

    # Visibility flags, maintained by admins.
    is_featured = models.BooleanField(default=False)
    is_verified = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    published_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        abstract = True
        ordering = ['-created_at']

    def __str__(self):
        return self.name


class Business(CatalogEntity):
    """
    A local business listed in the directory.

    A business is submitted by its owner and starts as 'pending' until an
    admin publishes, rejects or suspends it. It can belong to several
    categories through the `BusinessCategory` link table.
    """
    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        PUBLISHED = 'published', 'Published'
        REJECTED = 'rejected', 'Rejected'
        SUSPENDED = 'suspended', 'Suspended'

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='businesses',
        help_text="The user who registered and manages this business."
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    categories = models.ManyToManyField(
        Category,
        through='BusinessCategory',
        related_name='businesses',
        blank=True
    )

    # Contact information.
    phone = models.CharField(max_length=50, blank=True, default='')
    email = models.EmailField(blank=True, default='')
    website = models.URLField(blank=True, default='')

    class Meta(CatalogEntity.Meta):
        verbose_name_plural = "Businesses"


class BusinessCategory(models.Model):
    """Links a business to one of its categories."""
    business = models.ForeignKey(Business, on_delete=models.CASCADE, related_name='category_links')
    category = models.ForeignKey(Category, on_delete=models.CASCADE, related_name='business_links')
    is_primary = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['business', 'category'], name='unique_business_category'),
        ]

    def __str__(self):
        return f"{self.business} -> {self.category}"


class TourismPlace(CatalogEntity):
    """
    A point of interest for visitors (fort, temple, lake...).

    Tourism places are curated by admins: they start as 'draft' and belong to
    exactly one tourism category.
    """
    class Status(models.TextChoices):
        DRAFT = 'draft', 'Draft'
        PUBLISHED = 'published', 'Published'
        REJECTED = 'rejected', 'Rejected'

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tourism_places',
        help_text="The admin who created this place."
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tourism_places'
    )

    # Visitor information.
    short_description = models.CharField(max_length=300, blank=True, default='')
    entry_fee = models.CharField(max_length=100, blank=True, default='')
    timings = models.CharField(max_length=100, blank=True, default='')
    best_time_to_visit = models.CharField(max_length=100, blank=True, default='')
    duration = models.CharField(max_length=100, blank=True, default='')

    class Meta(CatalogEntity.Meta):
        verbose_name = "Tourism Place"
        verbose_name_plural = "Tourism Places"


class TourismImage(models.Model):
    """
    A picture in the gallery of a tourism place.

    Only the public URL is stored; the file itself lives in external storage.
    Removing an image deactivates the row instead of deleting it.

    Attributes:
        place (ForeignKey): The tourism place the image belongs to.
        url (URLField): Public URL of the stored file.
        image_type (CharField): 'cover', 'gallery' or 'featured'.
        sort_order (PositiveSmallIntegerField): Position in the gallery, ascending.
        is_active (BooleanField): False once the image was removed.
    """
    class ImageType(models.TextChoices):
        COVER = 'cover', 'Cover'
        GALLERY = 'gallery', 'Gallery'
        FEATURED = 'featured', 'Featured'

    place = models.ForeignKey(TourismPlace, on_delete=models.CASCADE, related_name='images')
    url = models.URLField(max_length=500)
    alt_text = models.CharField(max_length=200, blank=True, default='')
    caption = models.CharField(max_length=300, blank=True, default='')
    image_type = models.CharField(max_length=20, choices=ImageType.choices, default=ImageType.GALLERY)
    is_featured = models.BooleanField(default=False)
    sort_order = models.PositiveSmallIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tourism_images'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['sort_order', 'id']
        verbose_name = "Tourism Image"
        verbose_name_plural = "Tourism Images"

    def __str__(self):
        return f"{self.place} [{self.image_type}] {self.url}"
