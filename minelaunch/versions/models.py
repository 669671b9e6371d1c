"""Data models for Minecraft versions."""

from pydantic import BaseModel, Field, ValidationError, field_validator
from typing import Dict, List, Literal, Optional, Type, TypeVar, Union
from datetime import datetime

from ..errors import SpecParseError

DEFAULT_JAVA_MAJOR = 8

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_document(model: Type[ModelT], text: str, source: str) -> ModelT:
    """Parse a JSON document, reporting bad JSON and bad shapes alike."""
    try:
        return model.model_validate_json(text)
    except ValidationError as e:
        raise SpecParseError(source, str(e)) from e


class Download(BaseModel):
    """Descriptor for a single downloadable file."""
    path: Optional[str] = None
    sha1: str
    size: int
    url: str


class VersionDownloads(BaseModel):
    client: Download
    # Missing before 1.2.5
    server: Optional[Download] = None
    # Missing before 1.14.4
    client_mappings: Optional[Download] = None
    server_mappings: Optional[Download] = None


class RuleOs(BaseModel):
    name: Optional[str] = None
    version: Optional[str] = None
    arch: Optional[str] = None


class Rule(BaseModel):
    action: Literal["allow", "disallow"]
    os: Optional[RuleOs] = None
    features: Optional[Dict[str, bool]] = None


class VersionLibraryExtractor(BaseModel):
    exclude: List[str] = Field(default_factory=list)


class VersionLibraryDownloads(BaseModel):
    # Some old libraries only ship natives
    artifact: Optional[Download] = None
    classifiers: Optional[Dict[str, Download]] = None


class VersionLibrary(BaseModel):
    name: str
    downloads: VersionLibraryDownloads = Field(default_factory=VersionLibraryDownloads)
    rules: Optional[List[Rule]] = None
    extract: Optional[VersionLibraryExtractor] = None
    natives: Optional[Dict[str, str]] = None

    def maven_path(self, classifier: Optional[str] = None) -> str:
        """Relative repository path derived from ``group:artifact:version[:classifier]``."""
        parts = self.name.split(":")
        if len(parts) < 3:
            raise ValueError(f"Library name is not a maven coordinate: {self.name}")
        group, artifact, version = parts[:3]
        if classifier is None and len(parts) > 3:
            classifier = parts[3]
        filename = f"{artifact}-{version}"
        if classifier:
            filename += f"-{classifier}"
        return "/".join(group.split(".") + [artifact, version, f"{filename}.jar"])


class StaticArgument(BaseModel):
    """Argument that is always passed."""
    value: str

    def values(self) -> List[str]:
        return [self.value]


class DynamicArgument(BaseModel):
    """Argument passed only when its rules are satisfied."""
    rules: List[Rule]
    value: Union[str, List[str]]

    def values(self) -> List[str]:
        if isinstance(self.value, str):
            return [self.value]
        return list(self.value)


Argument = Union[StaticArgument, DynamicArgument]


class VersionArguments(BaseModel):
    game: List[Argument] = Field(default_factory=list)
    jvm: List[Argument] = Field(default_factory=list)

    @field_validator("game", "jvm", mode="before")
    @classmethod
    def _tag_arguments(cls, value):
        # Spec JSON mixes bare strings with {rules, value} objects
        tagged = []
        for item in value or []:
            if isinstance(item, str):
                tagged.append(StaticArgument(value=item))
            else:
                tagged.append(DynamicArgument.model_validate(item))
        return tagged


class VersionAssetIndex(BaseModel):
    id: str
    sha1: str
    size: int
    totalSize: Optional[int] = None
    url: str


class JavaVersion(BaseModel):
    component: Optional[str] = None
    majorVersion: int


class AssetObject(BaseModel):
    hash: str
    size: int

    @property
    def relative_path(self) -> str:
        return f"{self.hash[:2]}/{self.hash}"


class AssetIndex(BaseModel):
    objects: Dict[str, AssetObject] = Field(default_factory=dict)
    virtual: bool = False
    map_to_resources: bool = False


class VersionInfo(BaseModel):
    id: str
    type: str
    url: str
    time: Optional[datetime] = None
    releaseTime: Optional[datetime] = None
    sha1: Optional[str] = None
    complianceLevel: int = 0


class LatestVersions(BaseModel):
    release: str
    snapshot: str


class VersionManifest(BaseModel):
    latest: LatestVersions
    versions: List[VersionInfo]


class VersionSpec(BaseModel):
    """Parsed version.json data"""
    id: str
    type: str
    time: Optional[datetime] = None
    releaseTime: Optional[datetime] = None
    minimumLauncherVersion: Optional[int] = None
    downloads: VersionDownloads
    assetIndex: VersionAssetIndex
    assets: str
    arguments: Optional[VersionArguments] = None
    minecraftArguments: Optional[str] = None
    libraries: List[VersionLibrary] = Field(default_factory=list)
    mainClass: str
    javaVersion: Optional[JavaVersion] = None

    @property
    def java_major(self) -> int:
        if self.javaVersion is None:
            return DEFAULT_JAVA_MAJOR
        return self.javaVersion.majorVersion
