from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from logger import logger
from gcp.storage import current_millis
from gcp.storage_model import UploadedFile
from property.property_form_model import (
    PropertyFormValues, FormTab, UnitTypeDraft, FORM_TABS, TABS_BY_ID, BUILDING_TAB, FEATURES_TAB,
    STRING_SECTIONS, NEARBY_PLACES_SECTION, UNIT_TYPES_SECTION, ARRAY_SECTIONS,
)
from property.property_manager import PropertyManager
from property.property_model import Property, NearbyPlace, UnitType, subtypes_for, is_new_project_purpose
from utils.common_models import ActionResult, Notification

FORM_STATE_FIELD = 'form_state'
UNIT_TYPE_PREFIX = 'unit_'
NEARBY_NAME_FIELD = 'nearby_name'
NEARBY_DISTANCE_FIELD = 'nearby_distance'
PREVIOUS_TYPE_FIELD = 'previous_property_type'
CHECKBOX_FIELDS = ('parking_available', 'published')
FORM_RESET_MESSAGE = "The form could not be restored and was reset. Please check your entries before saving."

# carried between requests in a hidden field, scalar inputs travel as normal form fields
PERSISTED_FIELDS = {
    'active_tab', 'property_id', 'upload_key', 'images', 'amenities', 'highlights',
    'key_features', 'payment_plans', 'videos', 'nearby_places', 'unit_types',
}


def _clean_message(message: str) -> str:
    return message.removeprefix("Value error, ")


def _temp_upload_key() -> str:
    return f"temp_{current_millis()}"


class PropertyFormState(BaseModel):
    """
    State of the multi-step property form between two requests.

    Scalar inputs are kept raw in ``values`` so a tab can be validated on its
    own; the array sections are edited in place through ``add_item`` and
    ``remove_item`` and only merged into one document on ``submit``.
    """
    values: dict[str, Any] = Field(default_factory=lambda: PropertyFormValues().model_dump())
    active_tab: str = FORM_TABS[0].id
    property_id: Optional[str] = Field(default=None, description='Set when editing an existing property')
    upload_key: str = Field(default_factory=_temp_upload_key, description='Blob folder used before the property has an ID')

    images: list[str] = Field(default_factory=list)
    amenities: list[str] = Field(default_factory=list)
    highlights: list[str] = Field(default_factory=list)
    key_features: list[str] = Field(default_factory=list)
    payment_plans: list[str] = Field(default_factory=list)
    videos: list[str] = Field(default_factory=list)
    nearby_places: list[NearbyPlace] = Field(default_factory=list)
    unit_types: list[UnitType] = Field(default_factory=list)

    staging: dict[str, str] = Field(default_factory=dict)
    unit_type_draft: UnitTypeDraft = Field(default_factory=UnitTypeDraft)

    errors: dict[str, str] = Field(default_factory=dict)
    notifications: list[Notification] = Field(default_factory=list)
    form_error: Optional[str] = None
    scroll_to_error: bool = False
    input_rejected: bool = Field(default=False, description='Set when submitted input could not be parsed')
    state_reset: bool = False

    # Construction

    @classmethod
    def from_property(cls, property: Property) -> 'PropertyFormState':
        """Prefills the form for editing an existing property."""
        source = property.model_dump()
        values = PropertyFormValues().model_dump()
        values.update({
            name: source[name]
            for name in PropertyFormValues.model_fields
            if source.get(name) is not None
        })
        return cls(
            values=values,
            property_id=property.id,
            upload_key=property.id,
            images=list(property.images),
            amenities=list(property.amenities),
            highlights=list(property.highlights),
            key_features=list(property.key_features),
            payment_plans=list(property.payment_plans),
            videos=list(property.videos),
            nearby_places=list(property.nearby_places),
            unit_types=list(property.unit_types),
        )

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> 'PropertyFormState':
        """
        Rebuilds the state from a submitted form.

        Input that cannot be parsed does not raise: an unreadable hidden state
        starts a fresh form and a non-numeric unit type value is reported on
        its field. Either way ``input_rejected`` is set.
        """
        state = cls()
        raw_state = form.get(FORM_STATE_FIELD)
        if raw_state:
            try:
                state = cls.model_validate_json(raw_state)
            except ValidationError as e:
                logger.warning(f"[PROPERTY_FORM] Discarding unreadable form state: {e.error_count()} error(s)")
                state.state_reset = True
                state.input_rejected = True
                state.form_error = FORM_RESET_MESSAGE
                state.notify("Form reset", FORM_RESET_MESSAGE, Notification.Level.ERROR)

        values = dict(state.values)
        for name in PropertyFormValues.model_fields:
            if name in form:
                values[name] = form.get(name)
        for name in CHECKBOX_FIELDS:
            values[name] = form.get(name) or False
        state.values = values

        previous_type = form.get(PREVIOUS_TYPE_FIELD)
        if previous_type is not None and previous_type != values.get('property_type'):
            state.set_property_type(values.get('property_type'))

        state.staging = {
            key: form.get(key) or ""
            for key in list(STRING_SECTIONS.values()) + [NEARBY_NAME_FIELD, NEARBY_DISTANCE_FIELD]
        }
        state.read_unit_type_draft({
            name: form.get(f"{UNIT_TYPE_PREFIX}{name}")
            for name in UnitTypeDraft.model_fields
            if form.get(f"{UNIT_TYPE_PREFIX}{name}") is not None
        })
        return state

    def read_unit_type_draft(self, raw: dict[str, Any]):
        try:
            self.unit_type_draft = UnitTypeDraft.model_validate(raw)
            return
        except ValidationError as e:
            for err in e.errors():
                name = str(err['loc'][0])
                self.errors[f"{UNIT_TYPE_PREFIX}{name}"] = _clean_message(err['msg'])
                raw.pop(name, None)
        logger.info(f"[PROPERTY_FORM] Rejected unit type input: {list(self.errors)}")
        self.unit_type_draft = UnitTypeDraft.model_validate(raw)
        self.active_tab = FEATURES_TAB
        self.input_rejected = True
        self.notify("Invalid unit type", "Bedrooms, bathrooms, size and price must be numbers", Notification.Level.ERROR)

    def to_form_state(self) -> str:
        """Serialized value of the hidden field read back by ``from_form``."""
        return self.model_dump_json(include=PERSISTED_FIELDS)

    # Tabs

    @property
    def is_new_project(self) -> bool:
        return is_new_project_purpose(self.values.get('purpose'))

    @property
    def visible_tabs(self) -> list[FormTab]:
        return [tab for tab in FORM_TABS if tab.id != BUILDING_TAB or self.is_new_project]

    @property
    def subtype_options(self) -> list[tuple[str, str]]:
        return subtypes_for(self.values.get('property_type'))

    def _tab_ids(self) -> list[str]:
        return [tab.id for tab in self.visible_tabs]

    def _is_next_tab(self, tab: str) -> bool:
        tab_ids = self._tab_ids()
        if self.active_tab not in tab_ids:
            return False
        return tab_ids.index(tab) == tab_ids.index(self.active_tab) + 1

    def navigate_tab(self, tab: str) -> bool:
        """
        Moves to ``tab``. Stepping forward to the next tab first validates the
        fields of the current tab and stays put when any fail.
        """
        if tab not in self._tab_ids():
            logger.warning(f"[PROPERTY_FORM] Ignoring navigation to unavailable tab '{tab}'")
            return False

        if self._is_next_tab(tab):
            current_fields = TABS_BY_ID[self.active_tab].fields
            errors = self._validate_fields(current_fields)
            for field in current_fields:
                self.errors.pop(field, None)
            if errors:
                self.errors.update(errors)
                self.notify(
                    "Validation Error",
                    "Please fix the errors in this tab before proceeding",
                    Notification.Level.ERROR
                )
                return False

        self.active_tab = tab
        return True

    def select_tab(self, tab: str) -> bool:
        """Direct tab link, never validated."""
        if tab not in self._tab_ids():
            return False
        self.active_tab = tab
        return True

    def set_property_type(self, property_type: Optional[str]):
        self.values['property_type'] = property_type
        subtypes = subtypes_for(property_type)
        if subtypes:
            self.values['property_subtype'] = subtypes[0][0]

    # Array sections

    def add_item(self, section: str) -> bool:
        """Appends the staged input to ``section``; blank input is ignored."""
        if section in STRING_SECTIONS:
            staging_key = STRING_SECTIONS[section]
            staged = (self.staging.get(staging_key) or "").strip()
            if not staged:
                return False
            getattr(self, section).append(staged)
            self.staging[staging_key] = ""
            return True

        if section == NEARBY_PLACES_SECTION:
            name = (self.staging.get(NEARBY_NAME_FIELD) or "").strip()
            distance = (self.staging.get(NEARBY_DISTANCE_FIELD) or "").strip()
            if not name or not distance:
                return False
            self.nearby_places.append(NearbyPlace(name=name, distance=distance))
            self.staging[NEARBY_NAME_FIELD] = ""
            self.staging[NEARBY_DISTANCE_FIELD] = ""
            return True

        if section == UNIT_TYPES_SECTION:
            draft = self.unit_type_draft
            if draft.is_blank():
                self.notify(
                    "Unit Type Required",
                    "Please enter a unit type (e.g. 2 BHK) before adding",
                    Notification.Level.ERROR
                )
                return False
            self.unit_types.append(UnitType(**draft.model_dump()))
            self.unit_type_draft = UnitTypeDraft()
            self.notify("Unit Type Added", f"Added {draft.type} successfully", Notification.Level.SUCCESS)
            return True

        raise ValueError(f"Unknown section: {section}")

    def remove_item(self, section: str, index: int) -> bool:
        if section not in ARRAY_SECTIONS:
            raise ValueError(f"Unknown section: {section}")
        items = getattr(self, section)
        if not 0 <= index < len(items):
            return False
        del items[index]
        return True

    def remove_image(self, index: int, manager: PropertyManager) -> bool:
        """
        Deletes an uploaded image from storage and drops it from the gallery.
        While editing, the stored property is updated at once so it never
        points at a deleted file.
        """
        if not 0 <= index < len(self.images):
            return False
        deleted = manager.delete_property_image(self.images[index])
        if not deleted.success:
            logger.warning(f"[PROPERTY_FORM] Image could not be deleted from storage: {deleted.error}")
        images = [url for position, url in enumerate(self.images) if position != index]
        if self.property_id:
            result = manager.update_property_images(self.property_id, images)
            if not result.success:
                self.notify("Error removing image", result.error, Notification.Level.ERROR)
                return False
        self.images = images
        self.notify("Image removed", "The image has been deleted", Notification.Level.SUCCESS)
        return True

    # Uploads

    @property
    def storage_key(self) -> str:
        return self.property_id or self.upload_key

    def upload_images(self, files: Iterable[UploadedFile], manager: PropertyManager) -> int:
        uploaded = 0
        for file in files:
            result = manager.upload_property_image(file, self.storage_key)
            if result.success:
                self.images.append(result.data)
                uploaded += 1
            else:
                self.notify("Upload failed", result.error, Notification.Level.ERROR)
        return uploaded

    def upload_pdf(self, file: UploadedFile, manager: PropertyManager) -> bool:
        result = manager.upload_property_image(file, self.storage_key)
        if not result.success:
            self.notify("PDF upload failed", result.error, Notification.Level.ERROR)
            return False
        self.values['details_pdf'] = result.data
        return True

    def upload_sale_member_photo(self, file: UploadedFile, manager: PropertyManager) -> bool:
        result = manager.upload_property_image(file, self.storage_key)
        if not result.success:
            self.notify("Upload failed", result.error, Notification.Level.ERROR)
            return False
        self.values['assigned_sale_member_photo'] = result.data
        self.notify("Upload successful", "Sales member photo has been uploaded", Notification.Level.SUCCESS)
        return True

    # Validation & submission

    def _validate_fields(self, fields: Optional[Iterable[str]] = None) -> dict[str, str]:
        """Field errors limited to ``fields``, or all of them when None."""
        wanted = set(fields) if fields is not None else None
        if wanted is not None and not wanted:
            return {}
        try:
            PropertyFormValues.model_validate(self.values)
            return {}
        except ValidationError as e:
            errors = {}
            for error in e.errors():
                field = str(error['loc'][0]) if error['loc'] else '__root__'
                if wanted is None or field in wanted:
                    errors.setdefault(field, _clean_message(error['msg']))
            return errors

    def _submit_fields(self) -> set[str]:
        hidden = {tab.id for tab in FORM_TABS} - set(self._tab_ids())
        hidden_fields = {field for tab_id in hidden for field in TABS_BY_ID[tab_id].fields}
        return set(PropertyFormValues.model_fields) - hidden_fields

    def to_property(self) -> Property:
        """
        Flattens scalars, array sections and uploaded media into one record.
        Fields of hidden tabs are left out.
        """
        hidden = set(PropertyFormValues.model_fields) - self._submit_fields()
        defaults = PropertyFormValues().model_dump()
        raw = {name: defaults[name] if name in hidden else value for name, value in self.values.items()}
        values = PropertyFormValues.model_validate(raw).model_dump(exclude=hidden)
        return Property.model_validate({
            **values,
            'status': values['possess_status'],
            'images': self.images,
            'amenities': self.amenities,
            'highlights': self.highlights,
            'key_features': self.key_features,
            'payment_plans': self.payment_plans,
            'videos': self.videos,
            'nearby_places': [place.model_dump() for place in self.nearby_places],
            'unit_types': [unit.model_dump() for unit in self.unit_types],
        })

    def submit(self, manager: PropertyManager) -> ActionResult[str]:
        self.form_error = None
        self.scroll_to_error = False

        errors = self._validate_fields(self._submit_fields())
        if errors:
            self.errors = errors
            for tab in self.visible_tabs:
                if any(field in errors for field in tab.fields):
                    self.active_tab = tab.id
                    break
            self.notify("Validation Error", "Please fix the errors before saving", Notification.Level.ERROR)
            return ActionResult.fail("Please fix the errors before saving")

        self.errors = {}
        property = self.to_property()
        if self.property_id:
            result = manager.update_property(self.property_id, property)
            failure_title = "Error updating property"
        else:
            result = manager.add_property(property)
            failure_title = "Error adding property"

        if not result.success:
            logger.error(f"[PROPERTY_FORM] Save failed: {result.error}")
            self.form_error = result.error
            self.scroll_to_error = True
            self.notify(failure_title, result.error, Notification.Level.ERROR)
        return result

    def notify(self, title: str, description: Optional[str], level: Notification.Level):
        self.notifications.append(Notification(title=title, description=description, level=level))
