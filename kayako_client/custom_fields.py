"""Custom fields: definitions, options, groups of values and the ``HasCustomFields`` capability."""

from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

import structlog

from kayako_client.codec import BOOL, INT, POSITIVE_INT, from_base64, to_int, to_list, to_object, to_string
from kayako_client.exceptions import CustomFieldError, IllegalState, NotFound
from kayako_client.fields import Field
from kayako_client.object_base import ObjectBase, is_empty, wire_value
from kayako_client.result_set import ResultSet

if TYPE_CHECKING:
    from kayako_client.config import Config

logger = structlog.get_logger()

DEFINITIONS_CACHE_KEY = "custom_field_definitions"


class CustomFieldOption(ObjectBase):
    """Selectable option of a select, radio, checkbox or linked select field."""

    controller = "/Base/CustomField/ListOptions"
    object_xml_name = "option"
    read_only = True

    id = Field("@customfieldoptionid", POSITIVE_INT)
    field_id = Field("@customfieldid", POSITIVE_INT)
    value = Field("@optionvalue")
    display_order = Field("@displayorder", INT, default=0)
    is_selected = Field("@isselected", BOOL, default=False)
    parent_option_id = Field("@parentcustomfieldoptionid", POSITIVE_INT)

    @classmethod
    def get_all(cls, config: "Config", field_id: int) -> ResultSet["CustomFieldOption"]:
        return cls.generic_get_all(config, [field_id])

    def __str__(self) -> str:
        return f"{self.value} (field: {self.field_id})"


class CustomFieldDefinition(ObjectBase):
    """Definition of a custom field as configured in the admin panel.

    Definitions rarely change, so the list is cached in the configuration's
    :class:`~kayako_client.config.MemoCache` under ``custom_field_definitions``.
    """

    TYPE_TEXT = 1
    TYPE_TEXTAREA = 2
    TYPE_PASSWORD = 3
    TYPE_CHECKBOX = 4
    TYPE_RADIO = 5
    TYPE_SELECT = 6
    TYPE_MULTI_SELECT = 7
    TYPE_CUSTOM = 8
    TYPE_LINKED_SELECT = 9
    TYPE_DATE = 10
    TYPE_FILE = 11

    controller = "/Base/CustomField"
    object_xml_name = "customfield"
    read_only = True

    id = Field("@customfieldid", POSITIVE_INT)
    group_id = Field("@customfieldgroupid", POSITIVE_INT)
    title = Field("@title")
    type = Field("@fieldtype", INT)
    name = Field("@fieldname")
    default_value = Field("@defaultvalue")
    is_required = Field("@isrequired", BOOL, default=False)
    is_user_editable = Field("@usereditable", BOOL, default=False)
    is_staff_editable = Field("@staffeditable", BOOL, default=False)
    regexp_validate = Field("@regexpvalidate")
    display_order = Field("@displayorder", INT, default=0)
    encrypt_in_db = Field("@encryptindb", BOOL, default=False)
    description = Field("@description")

    @classmethod
    def get_all(cls, config: "Config", reload: bool = False) -> ResultSet["CustomFieldDefinition"]:
        return config.cache.get_or_load(DEFINITIONS_CACHE_KEY, lambda: cls.generic_get_all(config), reload)

    @classmethod
    def get(cls, config: "Config", name_or_id: str | int) -> "CustomFieldDefinition":
        """Find a definition by its identifier or field name.

        Raises:
            NotFound: If no definition matches
        """
        for definition in cls.get_all(config):
            if definition.id == to_int(name_or_id) or definition.name == name_or_id:
                return definition
        raise NotFound(f"Custom field definition {name_or_id} not found")

    def get_options(self, reload: bool = False) -> ResultSet[CustomFieldOption]:
        return self._memoized("options", lambda: CustomFieldOption.get_all(self.config, self.id), reload)

    def get_option(self, value_or_id: Any) -> CustomFieldOption | None:
        """Return the option with the given identifier or value."""
        if value_or_id is None:
            return None
        option_id = to_int(value_or_id)
        for option in self.get_options():
            if option.id == option_id or option.value == str(value_or_id):
                return option
        return None

    def __str__(self) -> str:
        return f"{self.title} (name: {self.name}, type: {self.type})"


class CustomField(ObjectBase):
    """Custom field value as returned within a custom field group.

    Fields are never fetched or saved on their own, their owner sends all
    group values at once.
    """

    object_xml_name = "field"
    read_only = True

    id = Field("@id", POSITIVE_INT)
    type = Field("@type", INT)
    name = Field("@name")
    title = Field("@title")
    raw_value = Field("#text")

    def __init__(self, config: "Config | None" = None, data: Any = None, group: "CustomFieldGroupBase | None" = None) -> None:
        self.group = group
        super().__init__(config, data)

    @staticmethod
    def create_by_type(group: "CustomFieldGroupBase", data: Any) -> "CustomField":
        """Build the field class matching the ``type`` attribute of ``data``."""
        field_type = to_int(wire_value(data, "@type"))
        field_class = FIELD_CLASSES.get(field_type, CustomField)
        return field_class(group._config, data, group=group)

    @property
    def definition(self) -> CustomFieldDefinition | None:
        return CustomFieldDefinition.get_all(self.config).filter(id=self.id).first()

    @property
    def value(self) -> Any:
        return self.raw_value

    @value.setter
    def value(self, value: Any) -> None:
        self._values["raw_value"] = to_string(value)

    def build_data(self, create: bool) -> dict[str, Any]:
        if self.raw_value is None:
            return {}
        return {self.name: self.raw_value}

    def __str__(self) -> str:
        return f"{self.title}: {self.value}"


class CustomFieldSelect(CustomField):
    """Field with one selected option (select and radio)."""

    def __init__(self, config: "Config | None" = None, data: Any = None, group: "CustomFieldGroupBase | None" = None) -> None:
        self._option: CustomFieldOption | None = None
        self._option_resolved = False
        super().__init__(config, data, group)

    def parse_data(self, data: Any) -> None:
        super().parse_data(data)
        self._option = None
        self._option_resolved = False

    def option_value(self) -> str | None:
        """Raw value identifying the selected option."""
        return self.raw_value

    def get_options(self) -> ResultSet[CustomFieldOption]:
        definition = self.definition
        return definition.get_options() if definition is not None else ResultSet()

    def get_option(self, value_or_id: Any) -> CustomFieldOption | None:
        definition = self.definition
        return definition.get_option(value_or_id) if definition is not None else None

    @property
    def selected_option(self) -> CustomFieldOption | None:
        if not self._option_resolved:
            self._option = self.get_option(self.option_value())
            self._option_resolved = True
        return self._option

    def set_selected_option(self, option: CustomFieldOption | None) -> "CustomFieldSelect":
        self._option = to_object(option, CustomFieldOption)
        self._option_resolved = True
        self._values["raw_value"] = self._option.value if self._option is not None else None
        return self

    @property
    def value(self) -> Any:
        option = self.selected_option
        return option.value if option is not None else None

    @value.setter
    def value(self, value: Any) -> None:
        self.set_selected_option(self.get_option(value))

    def build_data(self, create: bool) -> dict[str, Any]:
        option = self.selected_option
        if option is None:
            return {}
        return {self.name: option.id}


class CustomFieldLinkedSelect(CustomFieldSelect):
    """Two-level select; the value reads ``"<parent> > <child>"``."""

    # the server returns the separator HTML-escaped
    PARENT_CHILD_SEPARATOR = " &gt; "

    def option_value(self) -> str | None:
        raw_value = self.raw_value
        if raw_value and self.PARENT_CHILD_SEPARATOR in raw_value:
            return raw_value.split(self.PARENT_CHILD_SEPARATOR, 1)[1]
        return raw_value

    def set_selected_option(self, option: CustomFieldOption | None) -> "CustomFieldLinkedSelect":
        super().set_selected_option(option)
        if self._option is not None and self._option.parent_option_id is not None:
            parent = self.get_option(self._option.parent_option_id)
            if parent is not None:
                self._values["raw_value"] = self.PARENT_CHILD_SEPARATOR.join([parent.value, self._option.value])
        return self

    def build_data(self, create: bool) -> dict[str, Any]:
        option = self.selected_option
        if option is None:
            return {}
        if option.parent_option_id is not None:
            return {
                f"{self.name}[0]": option.parent_option_id,
                f"{self.name}[1][{option.parent_option_id}]": option.id,
            }
        return {f"{self.name}[0]": option.id}


class CustomFieldFile(CustomField):
    """File field; the value holds the base64 encoded file contents."""

    file_name = Field("@filename")

    def __init__(self, config: "Config | None" = None, data: Any = None, group: "CustomFieldGroupBase | None" = None) -> None:
        self._upload: bytes | None = None
        super().__init__(config, data, group)

    def get_contents(self) -> bytes | None:
        if self._upload is not None:
            return self._upload
        return from_base64(self.raw_value)

    def set_contents(self, contents: bytes, file_name: str) -> "CustomFieldFile":
        self._upload = contents
        self._values["file_name"] = file_name
        return self

    def set_contents_from_file(self, file_path: str | Path, file_name: str | None = None) -> "CustomFieldFile":
        path = Path(file_path)
        return self.set_contents(path.read_bytes(), file_name or path.name)

    @property
    def value(self) -> Any:
        return self.file_name

    @value.setter
    def value(self, value: Any) -> None:
        self.set_contents_from_file(value)

    def build_data(self, create: bool) -> dict[str, Any]:
        return {}

    def build_files(self) -> dict[str, tuple[str, bytes]]:
        if self._upload is None:
            return {}
        return {self.name: (self.file_name or self.name, self._upload)}


FIELD_CLASSES: dict[int, type[CustomField]] = {
    CustomFieldDefinition.TYPE_RADIO: CustomFieldSelect,
    CustomFieldDefinition.TYPE_SELECT: CustomFieldSelect,
    CustomFieldDefinition.TYPE_LINKED_SELECT: CustomFieldLinkedSelect,
    CustomFieldDefinition.TYPE_FILE: CustomFieldFile,
}


class CustomFieldGroupBase(ObjectBase):
    """Group of custom field values of one object.

    Groups are listed by the owning object's identifier and are saved
    through the owner, see :meth:`HasCustomFields.update_custom_fields`.
    """

    TYPE_TICKET = 0
    TYPE_USER = 1
    TYPE_USER_ORGANIZATION = 2
    TYPE_USER_LIVECHAT = 3
    TYPE_USER_TIME_TRACK = 4

    group_type: ClassVar[int | None] = None
    object_xml_name = "group"
    read_only = True

    id = Field("@id", POSITIVE_INT)
    title = Field("@title")
    display_order = Field("@displayorder", INT, default=0)

    def __init__(self, config: "Config | None" = None, data: Any = None) -> None:
        self._custom_fields: list[CustomField] = []
        super().__init__(config, data)

    @classmethod
    def get_all(cls, config: "Config", object_id: int) -> ResultSet["CustomFieldGroupBase"]:
        return cls.generic_get_all(config, [object_id])

    @classmethod
    def get(cls, *args: Any) -> "CustomFieldGroupBase":
        raise IllegalState(f"You can't get single object of type {cls.__name__}.")

    def refresh(self) -> "CustomFieldGroupBase":
        raise IllegalState(f"You can't refresh object of type {type(self).__name__}.")

    def parse_data(self, data: Any) -> None:
        super().parse_data(data)
        self._custom_fields = [CustomField.create_by_type(self, node) for node in to_list(wire_value(data, "field"))]

    @property
    def fields(self) -> ResultSet[CustomField]:
        return ResultSet(self._custom_fields)

    def build_data(self, create: bool) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for field in self._custom_fields:
            data.update(field.build_data(create))
        return data

    def build_files(self) -> dict[str, tuple[str, bytes]]:
        files: dict[str, tuple[str, bytes]] = {}
        for field in self._custom_fields:
            files.update(field.build_files())
        return files

    def __str__(self) -> str:
        return f"{self.title} ({len(self._custom_fields)} fields)"


class HasCustomFields:
    """Capability of objects carrying custom field values.

    Mix in before :class:`ObjectBase` and set ``custom_field_group_class``.
    Groups are loaded on first access and sent back by ``update()`` only if
    they were loaded.
    """

    custom_field_group_class: ClassVar[type[CustomFieldGroupBase]]

    def get_custom_field_groups(self, reload: bool = False) -> ResultSet[CustomFieldGroupBase]:
        """Return custom field groups of this object.

        Raises:
            IllegalState: If the object was not created yet
        """
        return self._memoized(
            "custom_field_groups",
            lambda: self.custom_field_group_class.get_all(self.config, self.id),
            reload,
        )

    def get_custom_fields(self, reload: bool = False) -> ResultSet[CustomField]:
        groups = self.get_custom_field_groups(reload)
        return ResultSet(field for group in groups for field in group.fields)

    def get_custom_field(self, name: str) -> CustomField | None:
        for field in self.get_custom_fields():
            if field.name == name:
                return field
        return None

    def get_custom_field_value(self, name: str) -> Any:
        field = self.get_custom_field(name)
        return field.value if field is not None else None

    def set_custom_field_value(self, name: str, value: Any):
        """Set a custom field value locally; ``update()`` sends it.

        Raises:
            CustomFieldError: If the field does not exist, is not editable, or is required and ``value`` is empty
        """
        field = self.get_custom_field(name)
        if field is None:
            raise CustomFieldError(f"Custom field {name} does not exist.")
        definition = field.definition
        if definition is not None:
            if not definition.is_user_editable:
                raise CustomFieldError(f"usereditable flag is disabled for custom field {field.title}.")
            if definition.is_required and is_empty(value):
                raise CustomFieldError(f"Field '{field.title}' is required, cannot be empty.")
        field.value = value
        return self

    def update_custom_fields(self):
        """Send loaded custom field values to the server and reload them."""
        if self._related.get("custom_field_groups") is None:
            return self

        data: dict[str, Any] = {}
        files: dict[str, tuple[str, bytes]] = {}
        for group in self.get_custom_field_groups():
            data.update(group.build_data(True))
            files.update(group.build_files())
        if not data and not files:
            return self

        controller = self.custom_field_group_class.controller
        logger.info("Updating custom fields", type=type(self).__name__, id=self.id, fields=len(data) + len(files))
        self.config.transport.post(controller, [self.id], data, files)
        self.get_custom_field_groups(reload=True)
        return self

    def update(self):
        groups = self._related.get("custom_field_groups")
        super().update()
        if groups is not None:
            self._related["custom_field_groups"] = groups
            self.update_custom_fields()
        return self
