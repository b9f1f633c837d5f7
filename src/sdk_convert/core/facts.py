"""Static rule tables consulted by the conversion passes."""

from types import MappingProxyType

# SDK identifiers
DEFAULT_SDK_ATTRIBUTE = "Microsoft.NET.Sdk"
DESKTOP_SDK_ATTRIBUTE = "Microsoft.NET.Sdk.WindowsDesktop"

# Property names
TARGET_FRAMEWORK_NAME = "TargetFramework"
TARGET_FRAMEWORK_VERSION_NAME = "TargetFrameworkVersion"
GENERATE_ASSEMBLY_INFO_NAME = "GenerateAssemblyInfo"
DEFINE_CONSTANTS_NAME = "DefineConstants"
DEBUG_TYPE_NAME = "DebugType"
OUTPUT_PATH_NAME = "OutputPath"
PLATFORM_TARGET_NAME = "PlatformTarget"
DOCUMENTATION_FILE_NAME = "DocumentationFile"
ROOT_NAMESPACE_NAME = "RootNamespace"
ASSEMBLY_NAME_NAME = "AssemblyName"
PROJECT_TYPE_GUIDS_NAME = "ProjectTypeGuids"
USE_WINFORMS_NAME = "UseWindowsForms"
USE_WPF_NAME = "UseWPF"

# Item types
PACKAGE_REFERENCE_ITEM_TYPE = "PackageReference"
REFERENCE_ITEM_TYPE = "Reference"
COMPILE_ITEM_TYPE = "Compile"
NONE_ITEM_TYPE = "None"
EMBEDDED_RESOURCE_ITEM_TYPE = "EmbeddedResource"
PAGE_ITEM_TYPE = "Page"
APPLICATION_DEFINITION_ITEM_TYPE = "ApplicationDefinition"

# Configuration dimensions
CONFIGURATION_DIMENSION = "Configuration"
PLATFORM_DIMENSION = "Platform"
# Order in which dimension values form a configuration identifier.
DIMENSION_NAMES = tuple(
    name.casefold() for name in (CONFIGURATION_DIMENSION, PLATFORM_DIMENSION)
)

# Monikers
NETCORE_DESKTOP_TFM = "netcoreapp3.1"
NETCOREAPP_PRELUDE = "netcoreapp"
NETSTANDARD_PRELUDE = "netstandard"
NETFRAMEWORK_PRELUDE = "net"
SYSTEM_VALUE_TUPLE_NAME = "System.ValueTuple"

PACKAGES_CONFIG_NAME = "packages.config"
PACKAGES_FOLDER_NAME = "packages"

# Imports the SDK supplies implicitly; anything else marks a custom project.
STANDARD_IMPORT_SUFFIXES = tuple(
    suffix.casefold()
    for suffix in (
        "Microsoft.Common.props",
        "Microsoft.CSharp.targets",
        "Microsoft.VisualBasic.targets",
        "Microsoft.FSharp.targets",
    )
)

UNNECESSARY_PROPERTIES = frozenset(
    name.casefold()
    for name in (
        "AppDesignerFolder",
        "AutoGenerateBindingRedirects",
        "Configuration",
        "Platform",
        "Deterministic",
        "ErrorReport",
        "ExpressionBlendVersion",
        "FileAlignment",
        "FileUpgradeFlags",
        "IsWebBootstrapper",
        "NuGetPackageImportStamp",
        "OldToolsVersion",
        "ProductVersion",
        "ProjectGuid",
        "ProjectTypeGuids",
        "RestorePackages",
        "SchemaVersion",
        "SolutionDir",
        "TargetFrameworkIdentifier",
        "TargetFrameworkProfile",
        "TargetFrameworkVersion",
        "UpgradeBackupLocation",
        "WarningLevel",
    )
)

# Includes the SDK references implicitly for every project.
UNNECESSARY_ITEM_INCLUDES = frozenset(
    name.casefold()
    for name in (
        "Microsoft.CSharp",
        "Microsoft.VisualBasic",
        "mscorlib",
        "System",
        "System.Core",
        "System.Data",
        "System.Data.DataSetExtensions",
        "System.Net.Http",
        "System.Numerics",
        "System.Runtime.Serialization",
        "System.Xml",
        "System.Xml.Linq",
        "Properties\\AssemblyInfo.cs",
        "My Project\\AssemblyInfo.vb",
    )
)

# Framework references that map one-to-one onto a NuGet package.
DEFAULT_ITEMS_THAT_HAVE_PACKAGE_EQUIVALENTS = MappingProxyType(
    {
        "System.ComponentModel.Composition": "4.7.0",
        "System.Data.Odbc": "4.7.0",
        "System.DirectoryServices": "4.7.0",
        "System.DirectoryServices.AccountManagement": "4.7.0",
        "System.Management": "4.7.0",
        "System.Runtime.Caching": "4.7.0",
    }
)

# Metadata that Visual Studio infers from file contents.
REDUNDANT_ITEM_METADATA = MappingProxyType(
    {
        "subtype": frozenset({"code", "designer"}),
    }
)

# Reference metadata that carries no meaning once packages are restored by the SDK.
UNNECESSARY_REFERENCE_METADATA = frozenset(
    {"hintpath", "private", "specificversion", "requiredtargetframework"}
)

DEFAULT_DEBUG_TYPES = MappingProxyType(
    {
        "debug": frozenset({"full", "portable"}),
        "release": frozenset({"pdbonly", "portable"}),
    }
)

DEFAULT_DEFINE_CONSTANTS = MappingProxyType(
    {
        "debug": frozenset({"DEBUG", "TRACE"}),
        "release": frozenset({"TRACE"}),
    }
)

DEFAULT_PLATFORM_TARGET = "AnyCPU"

# Windows desktop
WINFORMS_REFERENCES = frozenset({"system.windows.forms"})
WPF_REFERENCES = frozenset({"presentationcore", "presentationframework", "system.xaml"})
WPF_PROJECT_TYPE_GUID = "{60dc8134-eba5-43b8-bcc9-bb4bc16c2548}"

DESKTOP_REFERENCES_THAT_NEED_REMOVAL = frozenset(
    name.casefold()
    for name in (
        "PresentationCore",
        "PresentationFramework",
        "System.Deployment",
        "System.Drawing",
        "System.Windows.Forms",
        "System.Xaml",
        "UIAutomationClient",
        "UIAutomationProvider",
        "UIAutomationTypes",
        "WindowsBase",
    )
)

DESKTOP_GLOBBED_ITEM_TYPES = frozenset(
    {PAGE_ITEM_TYPE.casefold(), APPLICATION_DEFINITION_ITEM_TYPE.casefold()}
)
XAML_EXTENSION = ".xaml"
XAML_DESIGNER_GENERATOR = "MSBuild:Compile"
SETTINGS_EXTENSION = ".settings"
RESX_EXTENSION = ".resx"
DESIGNER_FILE_SUFFIXES = (".designer.cs", ".designer.vb")
